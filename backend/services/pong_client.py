"""
Headless Pong client.

Plays the same loop as the browser page: one task ticks physics (player 1
only) and publishes the local paddle, another polls `state` and reconciles.
Both tasks share a single ClientState owned by the PongClient.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from typing import Any

import httpx

from models.client import ClientPhase, ClientState
from models.table import TICK_SECONDS
from services.physics import clamp_paddle, step_ball

logger = logging.getLogger(__name__)


def reconcile(state: ClientState, server: dict[str, Any]) -> bool:
    """
    Fold one polled server state into the local state.

    Returns True when this client must consume `readyToStart` by publishing
    `{readyToStart: false, gameStarted: true}`; only player 1 does that.
    """
    state.opponent_connected = bool(server.get("p2Connected" if state.player == 1 else "p1Connected"))

    if server.get("countdownActive") and server.get("countdownValue", 0) > 0:
        if state.phase is not ClientPhase.COUNTDOWN:
            state.reset_match()
            state.phase = ClientPhase.COUNTDOWN
        state.countdown_value = server["countdownValue"]

    consume = False
    if server.get("readyToStart") and not state.game_started:
        state.reset_match()
        state.game_started = True
        state.phase = ClientPhase.PLAYING
        consume = state.is_authoritative
    elif (
        not server.get("countdownActive")
        and not server.get("readyToStart")
        and bool(server.get("gameStarted")) != state.game_started
    ):
        # Only readyToStart ends a countdown. While it is still up, the server's
        # gameStarted lags behind a client that already began.
        state.game_started = bool(server.get("gameStarted"))
        if state.game_started and state.phase is not ClientPhase.GAME_OVER:
            state.phase = ClientPhase.PLAYING

    if state.player == 2:
        state.ball_x = server["ballX"]
        state.ball_y = server["ballY"]
        state.ball_vel_x = server["ballVelX"]
        state.ball_vel_y = server["ballVelY"]
        state.ball_speed_multiplier = server.get("ballSpeedMultiplier") or 1.0
        state.p1_score = server["p1Score"]
        state.p2_score = server["p2Score"]
        state.p1_y = server["p1Y"]
        if server.get("winner") and state.winner is None:
            state.winner = server["winner"]
            state.phase = ClientPhase.GAME_OVER
    else:
        state.p2_y = server["p2Y"]
        if not state.game_started:
            state.ball_speed_multiplier = server.get("ballSpeedMultiplier") or 1.0
    return consume


class PongClient:
    """Drive one player of a match over HTTP. Follows the ball with its paddle when `follow_ball` is set."""

    def __init__(
        self,
        base_url: str,
        *,
        player: int,
        session_id: str | None = None,
        http: httpx.AsyncClient | None = None,
        rng: random.Random | None = None,
        follow_ball: bool = True,
        auto_start: bool = False,
        tick_seconds: float = TICK_SECONDS,
    ) -> None:
        if player not in (1, 2):
            raise ValueError(f"player must be 1 or 2; received {player!r}")
        self.state = ClientState(player=player, session_id=session_id)
        self._http = http or httpx.AsyncClient(base_url=base_url, timeout=5.0)
        self._owns_http = http is None
        self._rng = rng or random.Random()
        self._follow_ball = follow_ball
        self._auto_start = auto_start
        self._tick_seconds = tick_seconds
        self._start_requested = False
        self._stopped = asyncio.Event()

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def _post(self, action: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        try:
            response = await self._http.post("/", params={"action": action}, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("[client] %s request failed: %s", action, exc)
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("[client] %s -> %s with a non-JSON body", action, response.status_code)
            return None
        if response.status_code != 200 or not data.get("success"):
            logger.warning("[client] %s -> %s %s", action, response.status_code, data.get("error"))
            return None
        return data

    async def create_session(self) -> str:
        data = await self._post("create", {})
        if data is None:
            raise RuntimeError("Could not create a session")
        self.state.session_id = data["sessionId"]
        self.state.phase = ClientPhase.WAITING
        logger.info("[client] Created session %s", self.state.session_id)
        return self.state.session_id

    async def join(self) -> bool:
        data = await self._post("join", {"sessionId": self.state.session_id})
        if data is None:
            return False
        self.state.phase = ClientPhase.WAITING
        return True

    async def start(self) -> bool:
        return await self._post("start", {"sessionId": self.state.session_id}) is not None

    async def replay(self) -> bool:
        return await self._post("reset", {"sessionId": self.state.session_id}) is not None

    async def publish(self) -> bool:
        return await self._post("update", self.state.publish_payload()) is not None

    async def tick(self) -> None:
        """One physics/publish step."""
        state = self.state
        if self._follow_ball:
            state.target_y = state.ball_y
        if state.player == 1:
            state.p1_y = clamp_paddle(state.target_y)
        else:
            state.p2_y = clamp_paddle(state.target_y)

        if state.phase is ClientPhase.PLAYING:
            if state.is_authoritative:
                scorer = step_ball(state, self._rng)
                if scorer is not None:
                    logger.info("[client] Player %s scored (%s-%s)", scorer, state.p1_score, state.p2_score)
            await self.publish()
        elif not state.game_started and state.winner is None:
            await self.publish()

    async def poll(self) -> dict[str, Any] | None:
        """One poll/reconcile step. Returns the server state that was applied."""
        data = await self._post("state", {"sessionId": self.state.session_id})
        if data is None:
            return None
        server = data["state"]
        if reconcile(self.state, server):
            await self._post("update", {"sessionId": self.state.session_id, "readyToStart": False, "gameStarted": True})
        if (
            self._auto_start
            and not self._start_requested
            and self.state.phase is ClientPhase.WAITING
            and self.state.opponent_connected
        ):
            self._start_requested = True
            await self.start()
        return server

    async def _every_tick(self, step) -> None:
        while not self._stopped.is_set():
            await step()
            if self.state.phase is ClientPhase.GAME_OVER:
                self._stopped.set()
                break
            await asyncio.sleep(self._tick_seconds)

    async def run(self) -> int | None:
        """Play until a winner is known. Returns the winner."""
        if self.state.session_id is None:
            await self.create_session()
        elif self.state.player == 2:
            await self.join()
        self._stopped.clear()
        await asyncio.gather(self._every_tick(self.tick), self._every_tick(self.poll))
        logger.info("[client] Game over: player %s wins", self.state.winner)
        return self.state.winner

    def stop(self) -> None:
        self._stopped.set()


async def _main(args: argparse.Namespace) -> None:
    client = PongClient(args.base_url, player=args.player, session_id=args.session, auto_start=args.player == 1)
    try:
        if args.player == 1 and args.session is None:
            session_id = await client.create_session()
            print(f"Session {session_id}: run the opponent with --player 2 --session {session_id}")
        winner = await client.run()
        print(f"Player {winner} wins")
    finally:
        await client.aclose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Play Serverless Pong headlessly.")
    parser.add_argument("--base-url", default="http://localhost:3000")
    parser.add_argument("--player", type=int, choices=(1, 2), default=1)
    parser.add_argument("--session", default=None)
    logging.basicConfig(level=logging.INFO)
    asyncio.run(_main(parser.parse_args()))
