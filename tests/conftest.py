"""
Pytest configuration and fixtures
"""
import pytest
from flask import Flask
from flask.testing import FlaskClient

from postboard.app import create_app
from postboard.repository import PostRepository


@pytest.fixture()
def app(tmp_path) -> Flask:
    """Application bound to a throwaway SQLite file with migrations applied"""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'postboard.db'}",
        'AUTO_MIGRATE': True,
    })
    yield app


@pytest.fixture()
def client(app) -> FlaskClient:
    return app.test_client()


@pytest.fixture()
def repo(app) -> PostRepository:
    with app.app_context():
        yield PostRepository()
