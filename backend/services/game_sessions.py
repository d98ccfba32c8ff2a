"""Match lifecycle: create, join, start, update, reset and the read-driven countdown."""

from __future__ import annotations

import logging
import secrets
import time
from collections.abc import Callable

from models.session import PongSession, SessionPatch
from models.table import COUNTDOWN_SECONDS
from services.errors import SessionNotFound
from services.store import SessionStore

logger = logging.getLogger(__name__)

# Avoid 0/O, 1/I/l so IDs copied out of a player URL are not misread.
_SESSION_ALPHABET = "23456789abcdefghjkmnpqrstuvwxyz"
_SESSION_ID_LENGTH = 16


def new_session_id() -> str:
    return "".join(secrets.choice(_SESSION_ALPHABET) for _ in range(_SESSION_ID_LENGTH))


def countdown_remaining(start_ms: int, now_ms: int) -> int:
    """Whole seconds left on the countdown; clamped to [0, COUNTDOWN_SECONDS]."""
    elapsed_seconds = max(0, now_ms - start_ms) // 1000
    return max(0, COUNTDOWN_SECONDS - elapsed_seconds)


def resolve_countdown(session: PongSession, now_ms: int) -> PongSession:
    """
    Re-derive the countdown from its stored anchor.

    Returns the session unchanged when no countdown is running. When the
    derived value reaches zero the countdown is closed and `readyToStart`
    is raised for the clients to consume.
    """
    if not session.countdown_active or session.countdown_start_time is None:
        return session
    remaining = countdown_remaining(session.countdown_start_time, now_ms)
    if remaining > 0:
        if remaining == session.countdown_value:
            return session
        return session.model_copy(update={"countdown_value": remaining})
    return session.model_copy(
        update={
            "countdown_value": 0,
            "countdown_active": False,
            "ready_to_start": True,
            "countdown_start_time": None,
        }
    )


def apply_patch(session: PongSession, patch: SessionPatch) -> PongSession:
    """Overwrite exactly the fields present in the patch; everything else is left as stored."""
    changes = patch.session_fields()
    if patch.paddle_y is not None:
        if patch.player == 1:
            changes["p1_y"] = patch.paddle_y
        elif patch.player == 2:
            changes["p2_y"] = patch.paddle_y
    if changes.get("countdown_active") is False and changes.get("countdown_value") == 0:
        # An explicit readyToStart in the same patch still wins.
        changes.setdefault("ready_to_start", True)
    if not changes:
        return session
    return session.model_copy(update=changes)


class GameSessionMachine:
    """
    Authoritative transitions of a match. Every call reads the session from
    the store and writes it back; concurrent writers are last-write-wins.
    """

    def __init__(self, store: SessionStore, *, clock: Callable[[], float] = time.time) -> None:
        self.store = store
        self._clock = clock

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _load(self, session_id: str | None) -> PongSession:
        if not session_id:
            raise SessionNotFound(session_id)
        session = self.store.get(session_id)
        if session is None:
            logger.info("[game] Session %s not found (expired or never created)", session_id)
            raise SessionNotFound(session_id)
        return session

    def _arm_countdown(self, session: PongSession) -> None:
        session.countdown_active = True
        session.countdown_value = COUNTDOWN_SECONDS
        session.countdown_start_time = self._now_ms()

    def create(self) -> str:
        session_id = new_session_id()
        self.store.set(session_id, PongSession())
        logger.info("[game] Session created session_id=%s", session_id)
        return session_id

    def join(self, session_id: str | None) -> PongSession:
        session = self._load(session_id)
        session.p2_connected = True
        self.store.set(session_id, session)
        logger.info("[game] Player 2 joined session_id=%s", session_id)
        return session

    def start(self, session_id: str | None) -> PongSession:
        session = self._load(session_id)
        self._arm_countdown(session)
        self.store.set(session_id, session)
        logger.info("[game] Countdown started session_id=%s", session_id)
        return session

    def reset(self, session_id: str | None) -> PongSession:
        session = self._load(session_id)
        fresh = PongSession()
        session.ball_x = fresh.ball_x
        session.ball_y = fresh.ball_y
        session.ball_vel_x = fresh.ball_vel_x
        session.ball_vel_y = fresh.ball_vel_y
        session.ball_speed_multiplier = fresh.ball_speed_multiplier
        session.p1_score = 0
        session.p2_score = 0
        session.game_started = False
        session.winner = None
        session.ready_to_start = False
        self._arm_countdown(session)
        self.store.set(session_id, session)
        logger.info("[game] Match reset, countdown re-armed session_id=%s", session_id)
        return session

    def update(self, session_id: str | None, patch: SessionPatch) -> PongSession:
        session = apply_patch(self._load(session_id), patch)
        self.store.set(session_id, session)
        return session

    def read(self, session_id: str | None) -> PongSession:
        """Current state, resolving the countdown first and persisting any change it makes."""
        session = self._load(session_id)
        resolved = resolve_countdown(session, self._now_ms())
        if resolved is not session:
            self.store.set(session_id, resolved)
            if resolved.ready_to_start and not session.ready_to_start:
                logger.info("[game] Countdown finished, ready to start session_id=%s", session_id)
        logger.debug(
            "[game] State session_id=%s countdown=%s/%s ready=%s started=%s ball=(%.1f, %.1f)",
            session_id,
            resolved.countdown_active,
            resolved.countdown_value,
            resolved.ready_to_start,
            resolved.game_started,
            resolved.ball_x,
            resolved.ball_y,
        )
        return resolved
