from .errors import InvalidAction, SessionNotFound, StoreUnavailable, UnhandledFailure
from .game_sessions import GameSessionMachine, resolve_countdown
from .store import SessionStore, StoreProbe, get_session_store

__all__ = [
    "GameSessionMachine",
    "resolve_countdown",
    "SessionStore",
    "StoreProbe",
    "get_session_store",
    "StoreUnavailable",
    "SessionNotFound",
    "InvalidAction",
    "UnhandledFailure",
]
