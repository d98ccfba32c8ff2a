"""Redis connection and session lifetime settings, read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_REDIS_HOST = "localhost"
DEFAULT_REDIS_PORT = 6379
DEFAULT_SESSION_TTL_SECONDS = 300          # idle matches lapse after 5 minutes
DEFAULT_RETRY_SECONDS = 5.0
CONNECT_TIMEOUT_SECONDS = 1.5


def _env(name: str) -> str:
    return os.environ.get(name, "").strip()


@dataclass(frozen=True)
class StoreSettings:
    host: str = DEFAULT_REDIS_HOST
    port: int = DEFAULT_REDIS_PORT
    username: str | None = None
    password: str | None = None
    tls: bool = False
    session_ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS
    retry_seconds: float = DEFAULT_RETRY_SECONDS
    connect_timeout: float = CONNECT_TIMEOUT_SECONDS

    @property
    def authenticated(self) -> bool:
        return bool(self.username or self.password)

    @classmethod
    def from_env(cls) -> StoreSettings:
        """
        Build settings from CONNECTION_REDIS_* and friends.

        Missing username/password means an unauthenticated connection; TLS is
        enabled only when CONNECTION_REDIS_TLS is "true".
        """
        return cls(
            host=_env("CONNECTION_REDIS_HOST") or DEFAULT_REDIS_HOST,
            port=int(_env("CONNECTION_REDIS_PORT") or DEFAULT_REDIS_PORT),
            username=_env("CONNECTION_REDIS_USERNAME") or None,
            password=_env("CONNECTION_REDIS_PASSWORD") or None,
            tls=_env("CONNECTION_REDIS_TLS").lower() == "true",
            session_ttl_seconds=int(_env("SESSION_TTL_SECONDS") or DEFAULT_SESSION_TTL_SECONDS),
            retry_seconds=float(_env("STORE_RETRY_SECONDS") or DEFAULT_RETRY_SECONDS),
        )
