"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("FLASK_ENV", "testing")

import pytest

from app import create_app
from models import db as _db


@pytest.fixture()
def app():
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        try:
            yield app
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def db(app):
    return _db
