from typing import Any, Mapping, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from flask_sqlalchemy.session import Session

from postboard.exceptions import NotFoundError, ValidationError
from postboard.models import db, Post, utcnow
from postboard.validation import POST_RULES, RuleSpec, validate


class PostRepository:
    '''Create, read, update and delete ``Post`` rows.

    Every mutating call validates its input first and commits its own
    transaction. Must be used inside a Flask application context.
    '''

    rules : Mapping[str, RuleSpec] = POST_RULES

    @property
    def session(self) -> Session:
        return db.session

    def _fillable(self, fields:Mapping[str, Any]) -> dict[str, Any]:
        data : dict[str, Any] = {}
        for name in Post.FILLABLE:
            value : Any = fields.get(name)
            data[name] = value.strip() if isinstance(value, str) else value
        return data

    def _check(self, data:Mapping[str, Any]) -> None:
        errors : dict[str, str] = validate(data, self.rules)
        if errors:
            raise ValidationError(errors)

    def _commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise

    def create(self, fields:Mapping[str, Any]) -> Post:
        data : dict[str, Any] = self._fillable(fields)
        self._check(data)
        post : Post = Post(**data)
        self.session.add(post)
        self._commit()
        current_app.logger.info('Created post %s', post.id)
        return post

    def find(self, post_id:int) -> Post:
        post : Optional[Post] = self.session.get(Post, post_id)
        if post is None:
            raise NotFoundError('Post', post_id)
        return post

    def list(self) -> list[Post]:
        query = db.select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        return list(self.session.scalars(query).all())

    def count(self) -> int:
        return self.session.scalar(db.select(db.func.count()).select_from(Post)) or 0

    def update(self, post_id:int, fields:Mapping[str, Any]) -> Post:
        post : Post = self.find(post_id)
        data : dict[str, Any] = self._fillable(fields)
        self._check(data)
        post.title = data['title']
        post.body = data['body']
        post.updated_at = utcnow()
        self._commit()
        current_app.logger.info('Updated post %s', post.id)
        return post

    def delete(self, post_id:int) -> None:
        post : Post = self.find(post_id)
        self.session.delete(post)
        self._commit()
        current_app.logger.info('Deleted post %s', post_id)
