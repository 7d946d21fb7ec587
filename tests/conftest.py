"""
Test configuration and fixtures for shopkeep tests.
"""

import pytest
from fastapi.testclient import TestClient

from shopkeep.app import create_app
from shopkeep.core.config import Settings
from shopkeep.core.rate_limit import limiter
from shopkeep.core.security import new_credential
from shopkeep.core.tokens import TokenService


@pytest.fixture
def settings(tmp_path):
    """Isolated settings: in-memory user database, temporary product snapshot."""
    return Settings(
        database_url="sqlite://",
        products_file=tmp_path / "data" / "products.json",
        bcrypt_rounds=4,
        log_to_file=False,
    )


@pytest.fixture
def app(settings):
    """A fresh application per test, with its own secrets and data."""
    limiter.reset()
    yield create_app(settings)
    limiter.reset()


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def api_key(app):
    return app.state.services.secrets.api_key


@pytest.fixture
def token_service():
    """A standalone token service with a throwaway secret."""
    return TokenService(new_credential(), default_expires_in="1h")


@pytest.fixture
def login(client, api_key):
    """Log in through the API and return the issued token."""

    def do_login(username, password):
        response = client.post(
            "/auth/login",
            json={"username": username, "password": password},
            headers={"x-api-key": api_key},
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]["token"]

    return do_login


@pytest.fixture
def admin_headers(login):
    return {"Authorization": f"Bearer {login('alice', 'alice123')}"}


@pytest.fixture
def editor_headers(login):
    return {"Authorization": f"Bearer {login('bob', 'bob123')}"}


@pytest.fixture
def mouse():
    return {
        "name": "Mouse",
        "sku": "SKU-0002",
        "price": 19.99,
        "stock": 10,
        "category": "peripherals",
    }
