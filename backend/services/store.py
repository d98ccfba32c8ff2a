"""Redis-backed session store. Keyed by session ID; entries lapse after SESSION_TTL_SECONDS without a write."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache

import redis

from models.session import PongSession
from services.errors import StoreUnavailable
from services.settings import StoreSettings

logger = logging.getLogger(__name__)

KEY_PREFIX = "session:"

# AuthenticationError is a ConnectionError subclass; listed for readability.
_STORE_ERRORS = (
    redis.exceptions.ConnectionError,
    redis.exceptions.TimeoutError,
    redis.exceptions.AuthenticationError,
)


def session_key(session_id: str) -> str:
    return f"{KEY_PREFIX}{session_id}"


def build_redis_client(settings: StoreSettings) -> redis.Redis:
    """Create (but do not connect) a client; redis-py connects on the first command."""
    return redis.Redis(
        host=settings.host,
        port=settings.port,
        username=settings.username,
        password=settings.password,
        ssl=settings.tls,
        socket_connect_timeout=settings.connect_timeout,
        socket_timeout=settings.connect_timeout,
        decode_responses=True,
    )


@dataclass(frozen=True)
class StoreProbe:
    """Result of checking the store at the request boundary: a live client or the failure detail."""

    ok: bool
    client: redis.Redis | None = None
    detail: str | None = None


class SessionStore:
    """
    Typed get/set/delete of PongSession documents.

    The Redis client is created lazily on first use, proven with PING and then
    cached for the life of the process. A failed connection is remembered and
    every call fails fast with the same detail until `retry_seconds` elapse or
    `reset()` is called.
    """

    def __init__(
        self,
        settings: StoreSettings,
        *,
        client_factory: Callable[[StoreSettings], redis.Redis] = build_redis_client,
        monotonic: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._client_factory = client_factory
        self._monotonic = monotonic
        self._wall_clock = wall_clock
        self._lock = threading.Lock()
        self._client: redis.Redis | None = None
        self._unavailable_detail: str | None = None
        self._unavailable_at: float | None = None

    @property
    def settings(self) -> StoreSettings:
        return self._settings

    @property
    def unavailable_detail(self) -> str | None:
        return self._unavailable_detail

    def probe(self) -> StoreProbe:
        with self._lock:
            if self._client is not None:
                return StoreProbe(ok=True, client=self._client)
            if self._unavailable_detail is not None and not self._retry_due():
                return StoreProbe(ok=False, detail=self._unavailable_detail)
            try:
                client = self._client_factory(self._settings)
                client.ping()
            except _STORE_ERRORS as exc:
                self._mark_unavailable(exc)
                return StoreProbe(ok=False, detail=self._unavailable_detail)
            self._client = client
            self._unavailable_detail = None
            self._unavailable_at = None
            logger.info(
                "[store] Redis connected host=%s port=%s tls=%s auth=%s",
                self._settings.host,
                self._settings.port,
                self._settings.tls,
                self._settings.authenticated,
            )
            return StoreProbe(ok=True, client=client)

    def reset(self) -> None:
        """Forget the cached client (or cached failure) so the next call reconnects."""
        with self._lock:
            self._client = None
            self._unavailable_detail = None
            self._unavailable_at = None

    def get(self, session_id: str) -> PongSession | None:
        client = self._require_client()
        try:
            raw = client.get(session_key(session_id))
        except _STORE_ERRORS as exc:
            raise self._drop(exc) from exc
        if raw is None:
            return None
        return PongSession.model_validate_json(raw)

    def set(self, session_id: str, session: PongSession) -> None:
        """Stamp lastUpdate and write with SETEX so every write refreshes the TTL."""
        session.last_update = int(self._wall_clock() * 1000)
        client = self._require_client()
        try:
            client.setex(
                session_key(session_id),
                self._settings.session_ttl_seconds,
                session.model_dump_json(by_alias=True),
            )
        except _STORE_ERRORS as exc:
            raise self._drop(exc) from exc

    def delete(self, session_id: str) -> None:
        client = self._require_client()
        try:
            client.delete(session_key(session_id))
        except _STORE_ERRORS as exc:
            raise self._drop(exc) from exc

    def _require_client(self) -> redis.Redis:
        probe = self.probe()
        if not probe.ok or probe.client is None:
            raise StoreUnavailable(probe.detail)
        return probe.client

    def _retry_due(self) -> bool:
        if self._unavailable_at is None:
            return True
        return self._monotonic() - self._unavailable_at >= self._settings.retry_seconds

    def _mark_unavailable(self, exc: Exception) -> None:
        self._client = None
        self._unavailable_detail = str(exc) or exc.__class__.__name__
        self._unavailable_at = self._monotonic()
        logger.error(
            "[store] Redis unavailable host=%s port=%s: %s",
            self._settings.host,
            self._settings.port,
            self._unavailable_detail,
        )

    def _drop(self, exc: Exception) -> StoreUnavailable:
        """Connection lost mid-request: remember the failure and report it."""
        with self._lock:
            self._mark_unavailable(exc)
            return StoreUnavailable(self._unavailable_detail)


@lru_cache(maxsize=1)
def get_session_store() -> SessionStore:
    """Process-wide store built from the environment on first use."""
    return SessionStore(StoreSettings.from_env())
