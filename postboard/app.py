import io
from typing import Union, Optional, Any, Mapping, Iterable, Callable

import click
from flask import Flask, Blueprint, render_template, redirect, request, url_for, flash, current_app
from werkzeug.exceptions import NotFound
from werkzeug.formparser import parse_form_data
from werkzeug.wrappers import Request

from postboard import schema
from postboard.config import load_config
from postboard.exceptions import NotFoundError, ValidationError
from postboard.models import db, Post
from postboard.repository import PostRepository
from postboard.validation import POST_RULES, messages

posts : Blueprint = Blueprint('posts', __name__)


class MethodOverrideMiddleware:
    '''Let HTML forms reach PUT, PATCH and DELETE routes.

    A POST carrying ``_method`` in its form body (urlencoded or multipart), its
    query string, or an ``X-HTTP-Method-Override`` header is dispatched as that verb.
    '''

    allowed_methods : frozenset[str] = frozenset(['PUT', 'PATCH', 'DELETE'])
    form_types : tuple[str, ...] = ('application/x-www-form-urlencoded', 'multipart/form-data')

    def __init__(self, wsgi_app:Callable) -> None:
        self.wsgi_app : Callable = wsgi_app

    def __call__(self, environ:dict[str, Any], start_response:Callable) -> Iterable[bytes]:
        if environ.get('REQUEST_METHOD', '').upper() == 'POST':
            method : str = self._requested_method(environ).upper()
            if method in self.allowed_methods:
                environ['REQUEST_METHOD'] = method
        return self.wsgi_app(environ, start_response)

    def _requested_method(self, environ:dict[str, Any]) -> str:
        header : str = environ.get('HTTP_X_HTTP_METHOD_OVERRIDE', '')
        if header:
            return header
        query : str = Request(environ).args.get('_method', '')
        if query:
            return query
        if not environ.get('CONTENT_TYPE', '').startswith(self.form_types):
            return ''
        length : int = int(environ.get('CONTENT_LENGTH') or 0)
        body : bytes = environ['wsgi.input'].read(length) if length > 0 else b''
        environ['wsgi.input'] = io.BytesIO(body)
        _stream, form, _files = parse_form_data(environ)
        # the body is consumed here, hand the route a fresh stream
        environ['wsgi.input'] = io.BytesIO(body)
        return form.get('_method', '')


def repository() -> PostRepository:
    return PostRepository()


def render_form(template:str, form:Mapping[str, Any], errors:Optional[Mapping[str, str]]=None, post:Optional[Post]=None, status:int=200) -> tuple[str, int]:
    error_messages : dict[str, str] = messages(errors, POST_RULES) if errors else {}
    return render_template(template, form=form, errors=error_messages, post_data=post), status


@posts.route('/')
def home() -> Any:
    return redirect(url_for('posts.index'))


@posts.get('/posts')
def index() -> Union[str, Any]:
    return render_template('index.html', posts=repository().list())


@posts.get('/posts/create')
def create() -> Union[tuple[str, int], Any]:
    return render_form('create.html', form={})


@posts.post('/posts')
def store() -> Union[tuple[str, int], Any]:
    try:
        post : Post = repository().create(request.form)
    except ValidationError as e:
        current_app.logger.info('Rejected new post: %s', e.errors)
        return render_form('create.html', form=request.form, errors=e.errors, status=422)
    flash('Post created successfully.', 'success')
    return redirect(url_for('posts.show', post_id=post.id), code=303)


@posts.get('/posts/<int:post_id>')
def show(post_id:int) -> Union[str, Any]:
    return render_template('show.html', post_data=repository().find(post_id))


@posts.get('/posts/<int:post_id>/edit')
def edit(post_id:int) -> Union[tuple[str, int], Any]:
    post : Post = repository().find(post_id)
    return render_form('edit.html', form={'title': post.title, 'body': post.body}, post=post)


@posts.route('/posts/<int:post_id>', methods=['PUT', 'PATCH'])
def update(post_id:int) -> Union[tuple[str, int], Any]:
    repo : PostRepository = repository()
    try:
        post : Post = repo.update(post_id, request.form)
    except ValidationError as e:
        current_app.logger.info('Rejected update of post %s: %s', post_id, e.errors)
        return render_form('edit.html', form=request.form, errors=e.errors, post=repo.find(post_id), status=422)
    flash('Post updated successfully.', 'success')
    return redirect(url_for('posts.show', post_id=post.id), code=303)


@posts.delete('/posts/<int:post_id>')
def destroy(post_id:int) -> Any:
    repository().delete(post_id)
    flash('Post deleted successfully.', 'success')
    return redirect(url_for('posts.index'), code=303)


def not_found(_error:Union[NotFoundError, NotFound]) -> tuple[str, int]:
    return render_template('404.html'), 404


def register_commands(app:Flask) -> None:

    @app.cli.command('migrate')
    @click.option('--revision', default='head', show_default=True, help='Target revision.')
    def migrate_command(revision:str) -> None:
        '''Apply schema migrations.'''
        schema.upgrade(revision)
        click.echo(f'Schema at revision {schema.current_revision()}')

    @app.cli.command('rollback')
    @click.option('--revision', default='-1', show_default=True, help='Target revision, e.g. base.')
    def rollback_command(revision:str) -> None:
        '''Revert schema migrations.'''
        schema.downgrade(revision)
        click.echo(f'Schema at revision {schema.current_revision()}')

    @app.cli.command('seed')
    @click.option('--count', default=5, show_default=True, type=click.IntRange(min=0))
    def seed_command(count:int) -> None:
        '''Insert sample posts.'''
        repo : PostRepository = repository()
        for number in range(1, count + 1):
            repo.create({'title': f'Sample post {number}', 'body': f'This is the body of sample post {number}.'})
        click.echo(f'Seeded {count} posts, {repo.count()} in total')


def create_app(overrides:Optional[Mapping[str, Any]]=None) -> Flask:
    app : Flask = Flask(__name__)
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)
    app.secret_key = app.config['SECRET_KEY']
    app.logger.setLevel(app.config['LOG_LEVEL'])

    db.init_app(app)
    app.register_blueprint(posts)
    app.register_error_handler(NotFoundError, not_found)
    app.register_error_handler(404, not_found)
    app.wsgi_app = MethodOverrideMiddleware(app.wsgi_app)
    register_commands(app)

    if app.config['AUTO_MIGRATE']:
        with app.app_context():
            schema.upgrade()
    return app


if __name__ == '__main__':
    app : Flask = create_app()
    host : str = app.config['HOST']
    port : int = app.config['PORT']
    print(f'Postboard Server running on {host}:{port}')
    app.run(host=host, port=port)
