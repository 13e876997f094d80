"""Shared test fixtures."""

import pytest

from api import create_app
from models.role import Role
from utils.services import (
    get_credential_store,
    get_revocation_registry,
    get_token_service,
)

PASSWORD = "secret1"


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'characters.db'}"


@pytest.fixture
def app(database_url):
    """A fresh app per test: own stores, own database file."""
    app = create_app("testing", overrides={"DATABASE_URL": database_url})
    yield app
    app.extensions["storage"].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def credential_store(app):
    with app.app_context():
        return get_credential_store()


@pytest.fixture
def revocation_registry(app):
    with app.app_context():
        return get_revocation_registry()


@pytest.fixture
def token_service(app):
    with app.app_context():
        return get_token_service()


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client):
    """Register an account through the API and return the response JSON."""
    def _register(email="a@x.com", password=PASSWORD):
        resp = client.post("/auth/register", json={"email": email, "password": password})
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()
    return _register


@pytest.fixture
def login(client, register):
    """Register (if needed) and log in, returning the token payload."""
    def _login(email="a@x.com", password=PASSWORD, role=None):
        resp = client.post("/auth/login", json={"email": email, "password": password})
        if resp.status_code == 401:
            user = register(email, password)
            if role is not None:
                client.application.extensions["credential_store"].set_role(user["id"], role)
            resp = client.post("/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.get_json()
        return resp.get_json()
    return _login


@pytest.fixture
def user_token(login):
    return login("user@x.com")["accessToken"]


@pytest.fixture
def admin_token(login):
    return login("admin@x.com", role=Role.ADMIN)["accessToken"]
