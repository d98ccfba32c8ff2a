from .client import ClientPhase, ClientState
from .session import NULLABLE_FIELDS, PongSession, SessionPatch
from .table import COUNTDOWN_SECONDS, TICK_SECONDS, WINNING_SCORE

__all__ = [
    "PongSession",
    "SessionPatch",
    "NULLABLE_FIELDS",
    "ClientPhase",
    "ClientState",
    "COUNTDOWN_SECONDS",
    "TICK_SECONDS",
    "WINNING_SCORE",
]
