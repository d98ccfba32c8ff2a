from unittest.mock import patch

from services.settings import (
    DEFAULT_REDIS_HOST,
    DEFAULT_REDIS_PORT,
    DEFAULT_SESSION_TTL_SECONDS,
    StoreSettings,
)


def test_from_env_defaults() -> None:
    with patch.dict("os.environ", {}, clear=True):
        settings = StoreSettings.from_env()
    assert settings.host == DEFAULT_REDIS_HOST
    assert settings.port == DEFAULT_REDIS_PORT
    assert settings.username is None
    assert settings.password is None
    assert settings.authenticated is False
    assert settings.tls is False
    assert settings.session_ttl_seconds == DEFAULT_SESSION_TTL_SECONDS
    assert settings.connect_timeout < 2


def test_from_env_reads_connection_values() -> None:
    env = {
        "CONNECTION_REDIS_HOST": "  cache.internal ",
        "CONNECTION_REDIS_PORT": "6380",
        "CONNECTION_REDIS_USERNAME": "pong",
        "CONNECTION_REDIS_PASSWORD": "hunter2",
        "CONNECTION_REDIS_TLS": "true",
        "SESSION_TTL_SECONDS": "60",
    }
    with patch.dict("os.environ", env, clear=True):
        settings = StoreSettings.from_env()
    assert settings.host == "cache.internal"
    assert settings.port == 6380
    assert settings.authenticated is True
    assert settings.tls is True
    assert settings.session_ttl_seconds == 60


def test_tls_only_enabled_by_true() -> None:
    with patch.dict("os.environ", {"CONNECTION_REDIS_TLS": "yes"}, clear=True):
        assert StoreSettings.from_env().tls is False
