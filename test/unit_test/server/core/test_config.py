"""Unit tests for server configuration settings model.

Tests verify that Settings binds environment variables and that the grouped
configuration models fall back to their defaults when a variable is unset.
"""

import pytest

from dressla.server.core.config import (
    BOG_CALLBACK_PUBLIC_KEY,
    AuthConfig,
    CORSConfig,
    MarketplaceConfig,
    PaymentGatewayConfig,
    PostgreSQLConfig,
    Settings,
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "DATABASE_URL",
        "DRESSLA_BCRYPT_ROUNDS",
        "DRESSLA_JWT_SECRET",
        "BOG_CLIENT_ID",
        "BOG_ENABLE_SPLIT",
        "DRESSLA_VERIFICATION_THRESHOLD",
        "CORS_ORIGINS",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _settings() -> Settings:
    return Settings(_env_file=None)


class TestSettingsBinding:
    """Test Settings model environment variable binding."""

    def test_server_binding(self, clean_env):
        clean_env.setenv("DRESSLA_SERVER_HOST", "127.0.0.1")
        clean_env.setenv("DRESSLA_SERVER_PORT", "9000")

        settings = _settings()

        assert settings.server_host == "127.0.0.1"
        assert settings.server_port == 9000

    def test_database_url_default(self, clean_env):
        assert _settings().database_url.startswith("postgresql+asyncpg://")

    def test_database_url_binding(self, clean_env):
        clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///./dressla.db")

        assert _settings().database_url == "sqlite+aiosqlite:///./dressla.db"


class TestGroupedConfigs:
    def test_defaults(self, clean_env):
        settings = _settings()

        assert settings.auth.bcrypt_rounds == 12
        assert settings.auth.jwt_algorithm == "HS256"
        assert settings.payment_gateway.public_key == BOG_CALLBACK_PUBLIC_KEY
        assert settings.payment_gateway.enable_split is False
        assert settings.marketplace.verification_revenue_threshold == 100.0
        assert settings.email.api_url is None

    def test_auth_from_environment(self, clean_env):
        clean_env.setenv("DRESSLA_JWT_SECRET", "s3cret")
        clean_env.setenv("DRESSLA_BCRYPT_ROUNDS", "5")

        auth = _settings().auth

        assert isinstance(auth, AuthConfig)
        assert auth.jwt_secret == "s3cret"
        assert auth.bcrypt_rounds == 5

    def test_payment_gateway_from_environment(self, clean_env):
        clean_env.setenv("BOG_CLIENT_ID", "client")
        clean_env.setenv("BOG_ENABLE_SPLIT", "true")

        gateway = _settings().payment_gateway

        assert isinstance(gateway, PaymentGatewayConfig)
        assert gateway.client_id == "client"
        assert gateway.enable_split is True
        assert gateway.currency == "GEL"

    def test_groups_follow_field_changes(self, clean_env):
        settings = _settings()

        settings.BOG_CALLBACK_PUBLIC_KEY = "-----BEGIN PUBLIC KEY-----"

        assert settings.payment_gateway.public_key == "-----BEGIN PUBLIC KEY-----"
        assert settings.payment_gateway is not settings.payment_gateway

    def test_marketplace_threshold(self, clean_env):
        clean_env.setenv("DRESSLA_VERIFICATION_THRESHOLD", "250.5")

        marketplace = _settings().marketplace

        assert isinstance(marketplace, MarketplaceConfig)
        assert marketplace.verification_revenue_threshold == 250.5

    def test_cors_origins_json_list(self, clean_env):
        clean_env.setenv("CORS_ORIGINS", '["https://dressla.ge","https://admin.dressla.ge"]')

        cors = _settings().cors

        assert isinstance(cors, CORSConfig)
        assert cors.origins == ["https://dressla.ge", "https://admin.dressla.ge"]


class TestConfigModels:
    def test_models_accept_field_names(self):
        assert PostgreSQLConfig(host="db", port=6543).port == 6543
        assert PaymentGatewayConfig(client_id="x").client_id == "x"

    def test_models_accept_aliases(self):
        assert PostgreSQLConfig.model_validate({"POSTGRES_HOST": "db"}).host == "db"
