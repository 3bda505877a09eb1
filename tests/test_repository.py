import logging
from datetime import datetime

import pytest
from sqlalchemy.exc import IntegrityError

from postboard.exceptions import NotFoundError, ValidationError
from postboard.models import db


def test_create_then_find_returns_matching_fields(repo):
    post = repo.create({'title': 'First', 'body': 'Hello there'})
    found = repo.find(post.id)
    assert found.id == post.id
    assert found.title == 'First'
    assert found.body == 'Hello there'
    assert found.created_at is not None
    assert found.updated_at is not None


def test_create_trims_input(repo):
    post = repo.create({'title': '  Spaced  ', 'body': ' text '})
    assert post.title == 'Spaced'
    assert post.body == 'text'


def test_create_without_title_raises_validation_error(repo):
    with pytest.raises(ValidationError) as excinfo:
        repo.create({'body': 'orphan body'})
    assert excinfo.value.errors == {'title': 'required'}
    assert repo.count() == 0


def test_create_ignores_guarded_fields(repo):
    post = repo.create({'id': 99, 'title': 'T', 'body': 'B', 'created_at': 'yesterday'})
    assert post.id != 99
    assert isinstance(post.created_at, datetime)


def test_list_returns_every_post_newest_first(repo):
    created = [repo.create({'title': f'Post {n}', 'body': 'b'}) for n in range(3)]
    listed = repo.list()
    assert len(listed) == 3
    assert [p.id for p in listed] == [p.id for p in reversed(created)]


def test_list_is_empty_without_posts(repo):
    assert repo.list() == []


def test_update_changes_fields_and_refreshes_updated_at(repo):
    post = repo.create({'title': 'Old', 'body': 'old body'})
    post.updated_at = datetime(2000, 1, 1)
    db.session.commit()
    created_at = post.created_at

    updated = repo.update(post.id, {'title': 'New', 'body': 'new body'})
    assert updated.id == post.id
    assert updated.title == 'New'
    assert updated.body == 'new body'
    assert updated.created_at == created_at
    assert updated.updated_at > datetime(2000, 1, 1)


def test_update_revalidates(repo):
    post = repo.create({'title': 'Keep', 'body': 'b'})
    with pytest.raises(ValidationError) as excinfo:
        repo.update(post.id, {'title': 'x' * 256, 'body': 'b'})
    assert excinfo.value.errors == {'title': 'max'}
    assert repo.find(post.id).title == 'Keep'


def test_update_missing_post_raises_not_found_before_validating(repo):
    with pytest.raises(NotFoundError):
        repo.update(404, {})


def test_delete_makes_find_raise_not_found(repo):
    post = repo.create({'title': 'Doomed', 'body': 'b'})
    repo.delete(post.id)
    with pytest.raises(NotFoundError) as excinfo:
        repo.find(post.id)
    assert excinfo.value.record_id == post.id


def test_delete_missing_post_raises_not_found(repo):
    with pytest.raises(NotFoundError):
        repo.delete(1)


def test_to_dict_exposes_columns(repo):
    post = repo.create({'title': 'T', 'body': 'B'})
    data = post.to_dict()
    assert set(data) == {'id', 'title', 'body', 'created_at', 'updated_at'}
    assert data['title'] == 'T'


def test_failed_commit_rolls_back_and_propagates(repo, monkeypatch):
    rollbacks = []
    rollback = db.session.rollback

    def failing_commit():
        raise IntegrityError('INSERT INTO posts', {}, Exception('constraint failed'))

    def recording_rollback():
        rollbacks.append(True)
        rollback()

    monkeypatch.setattr(db.session, 'commit', failing_commit)
    monkeypatch.setattr(db.session, 'rollback', recording_rollback)

    with pytest.raises(IntegrityError):
        repo.create({'title': 'Unsaved', 'body': 'b'})
    assert rollbacks == [True]

    monkeypatch.undo()
    assert repo.count() == 0


def test_mutations_are_logged(repo, caplog):
    with caplog.at_level(logging.INFO):
        post_id = repo.create({'title': 'Logged', 'body': 'b'}).id
        repo.update(post_id, {'title': 'Logged again', 'body': 'b'})
        repo.delete(post_id)
    assert f'Created post {post_id}' in caplog.text
    assert f'Updated post {post_id}' in caplog.text
    assert f'Deleted post {post_id}' in caplog.text
