"""Pytest fixtures for the message archive test-suite.

Each test gets a fresh application bound to an in-memory SQLite database;
tables are created before and dropped after every test so committed data
never leaks between cases.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest
from flask import Flask
from flask.testing import FlaskClient
from message_archive import create_app
from message_archive.core.config import TestingConfig
from message_archive.core.extensions import db as _db


@pytest.fixture()
def app() -> Generator[Flask, None, None]:
    """Create a Flask application configured for testing.

    Yields
    ------
    flask.Flask
        Application with :class:`TestingConfig` applied and an active app
        context, so ``db.session`` is usable directly from tests.
    """
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestingConfig)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def db(app: Flask):
    """Return the Flask-SQLAlchemy extension bound to the testing app."""
    return _db


@pytest.fixture()
def session(db):
    """Return the scoped session shared by app code and factories."""
    return db.session


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def api_prefix(app: Flask) -> str:
    """Return the versioned API root, e.g. ``/api/v1``."""
    return f"{app.config['API_BASE_PREFIX'].rstrip('/')}/v1"


@pytest.fixture()
def issue_token(client: FlaskClient, api_prefix: str) -> Callable[..., dict]:
    """Issue a token through the public endpoint and return its JSON body."""

    def _issue(name: str = "test-client", **extra) -> dict:
        resp = client.post(f"{api_prefix}/tokens", json={"name": name, **extra})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _issue


@pytest.fixture()
def auth_headers(issue_token) -> dict[str, str]:
    """``Authorization`` header carrying a freshly issued, valid token."""
    token = issue_token()
    return {"Authorization": f"Bearer {token['token']}"}


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


# -- Hook up Factory Boy to the application session ----------------------------
@pytest.fixture(autouse=True)
def _factories_session(request):
    """Wire Factory Boy's session helper when a test uses the database."""
    if "app" not in request.fixturenames:
        yield
        return
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(request.getfixturevalue("session"))
    yield
    SQLAlchemySession.set(None)
