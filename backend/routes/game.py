"""
Game request router.

`handle_request` is platform-agnostic: it takes an HTTP method, the full URL
and the raw body, and returns a HandlerResponse. The FastAPI route at the
bottom is one adapter; any function runtime can forward into it the same way.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlsplit

from fastapi import APIRouter, Depends, Request, Response
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from models.session import SessionPatch
from services.client_page import render_client_page
from services.errors import InvalidAction, PongError, SessionNotFound, StoreUnavailable, UnhandledFailure
from services.game_sessions import GameSessionMachine
from services.store import get_session_store

router = APIRouter(tags=["game"])
logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}
HTML_HEADERS = {"Content-Type": "text/html; charset=utf-8"}


@dataclass
class HandlerResponse:
    status_code: int
    body: str
    headers: dict[str, str] = field(default_factory=lambda: dict(JSON_HEADERS))

    def json(self) -> Any:
        return json.loads(self.body)


def _json_response(status_code: int, payload: dict[str, Any]) -> HandlerResponse:
    return HandlerResponse(status_code=status_code, body=json.dumps(payload))


def _error_response(exc: PongError) -> HandlerResponse:
    return _json_response(exc.status_code, exc.to_dict())


def _action_from_url(url: str) -> str | None:
    values = parse_qs(urlsplit(url).query).get("action")
    return values[0] if values else None


def _parse_body(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, (bytes, str)):
        try:
            text = body.decode("utf-8") if isinstance(body, bytes) else body
            if not text.strip():
                return {}
            body = json.loads(text)
        except ValueError as exc:
            raise InvalidAction("Invalid request body") from exc
    if not isinstance(body, dict):
        raise InvalidAction("Invalid request body")
    return body


def _session_id(payload: dict[str, Any]) -> str | None:
    """A sessionId that is not a string cannot name a session."""
    value = payload.get("sessionId")
    return value if isinstance(value, str) else None


def _create(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    return {"success": True, "sessionId": machine.create()}


def _join(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    session = machine.join(_session_id(payload))
    return {"success": True, "p2Connected": session.p2_connected}


def _start(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    machine.start(_session_id(payload))
    return {"success": True}


def _reset(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    machine.reset(_session_id(payload))
    return {"success": True}


def _update(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    session_id = _session_id(payload)
    if session_id is None:
        raise SessionNotFound(session_id)
    fields = {key: value for key, value in payload.items() if key != "sessionId"}
    try:
        patch = SessionPatch.model_validate(fields)
    except ValidationError as exc:
        raise InvalidAction("Invalid update fields") from exc
    machine.update(session_id, patch)
    return {"success": True}


def _state(machine: GameSessionMachine, payload: dict[str, Any]) -> dict[str, Any]:
    session = machine.read(_session_id(payload))
    return {"success": True, "state": session.to_wire()}


ACTIONS: dict[str, Callable[[GameSessionMachine, dict[str, Any]], dict[str, Any]]] = {
    "create": _create,
    "join": _join,
    "start": _start,
    "reset": _reset,
    "update": _update,
    "state": _state,
}


def handle_request(method: str, url: str, body: Any, machine: GameSessionMachine) -> HandlerResponse:
    """Route one request: GET serves the client page, POST runs an action, anything else is 405."""
    action = _action_from_url(url)
    method = method.upper()

    if method == "GET" and not action:
        return HandlerResponse(status_code=200, body=render_client_page(), headers=dict(HTML_HEADERS))
    if method != "POST":
        return _json_response(405, {"success": False, "error": "Method not allowed"})

    probe = machine.store.probe()
    if not probe.ok:
        logger.warning("[router] Store unavailable, rejecting action=%s: %s", action, probe.detail)
        return _error_response(StoreUnavailable(probe.detail))

    try:
        payload = _parse_body(body)
        handler = ACTIONS.get(action or "")
        if handler is None:
            raise InvalidAction()
        return _json_response(200, handler(machine, payload))
    except StoreUnavailable as exc:
        logger.warning("[router] Store dropped during action=%s: %s", action, exc.detail)
        return _error_response(exc)
    except SessionNotFound as exc:
        return _error_response(exc)
    except InvalidAction as exc:
        logger.info("[router] Rejected action=%r: %s", action, exc)
        return _error_response(exc)
    except Exception:
        logger.exception("[router] Unhandled failure for action=%s", action)
        return _error_response(UnhandledFailure())


def get_game_machine() -> GameSessionMachine:
    return GameSessionMachine(get_session_store())


# Every method reaches handle_request so non-POST calls get its JSON 405.
FORWARDED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@router.api_route("/", methods=FORWARDED_METHODS)
@router.api_route("/api/game", methods=FORWARDED_METHODS)
async def game_endpoint(request: Request, machine: GameSessionMachine = Depends(get_game_machine)) -> Response:
    """Forward method, URL and body into handle_request; Redis calls run off the event loop."""
    body = await request.body()
    result = await run_in_threadpool(handle_request, request.method, str(request.url), body, machine)
    return Response(content=result.body, status_code=result.status_code, headers=result.headers)
