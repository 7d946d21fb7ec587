"""
Tests for environment based settings.
"""
from pathlib import Path

import pytest

from shopkeep.core.config import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in [
        "PORT", "SHOPKEEP_PORT", "JWT_EXPIRES", "SHOPKEEP_JWT_EXPIRES",
        "SHOPKEEP_PRODUCTS_FILE", "SHOPKEEP_CORS_ORIGINS", "SHOPKEEP_SEED_DEMO",
    ]:
        monkeypatch.delenv(name, raising=False)


class TestSettingsFromEnv:
    """Tests for Settings.from_env()."""

    def test_defaults(self):
        settings = Settings.from_env()

        assert settings.port == 3000
        assert settings.token_expires_in == "2h"
        assert settings.products_file == Path(".data/products.json")
        assert settings.seed_demo_data is True

    def test_plain_port_and_expiry_fallbacks(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("JWT_EXPIRES", "30m")

        settings = Settings.from_env()

        assert settings.port == 8080
        assert settings.token_expires_in == "30m"

    def test_prefixed_variables_win(self, monkeypatch):
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("SHOPKEEP_PORT", "9090")

        assert Settings.from_env().port == 9090

    def test_empty_products_file_disables_persistence(self, monkeypatch):
        monkeypatch.setenv("SHOPKEEP_PRODUCTS_FILE", "")

        assert Settings.from_env().products_file is None

    def test_cors_origins(self, monkeypatch):
        monkeypatch.setenv("SHOPKEEP_CORS_ORIGINS", "http://a.test, http://b.test")

        assert Settings.from_env().cors_origins == ["http://a.test", "http://b.test"]

    @pytest.mark.parametrize("name, value", [("PORT", "http"), ("PORT", "70000"), ("JWT_EXPIRES", "soon")])
    def test_invalid_values_fail_fast(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)

        with pytest.raises(ValueError):
            Settings.from_env()


class TestInMemoryProducts:
    """Tests for running without a snapshot file."""

    def test_app_without_persistence(self, tmp_path):
        from fastapi.testclient import TestClient
        from shopkeep.app import create_app

        app = create_app(Settings(database_url="sqlite://", products_file=None, bcrypt_rounds=4, log_to_file=False))
        api_key = app.state.services.secrets.api_key

        response = TestClient(app).get("/products", headers={"x-api-key": api_key})

        assert response.status_code == 200
        assert response.json()["meta"]["total"] == 1
        assert list(tmp_path.iterdir()) == []
