from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .table import BASE_BALL_SPEED, CANVAS_HEIGHT, FULL_WIDTH


class ClientPhase(str, Enum):
    LOBBY = "lobby"            # no session yet
    WAITING = "waiting"        # session open, countdown not started
    COUNTDOWN = "countdown"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class ClientState:
    """Everything one player's client knows about the match; owned by a single PongClient."""

    player: int                              # 1 is authoritative for ball physics
    session_id: str | None = None
    phase: ClientPhase = ClientPhase.LOBBY
    game_started: bool = False
    p1_y: float = CANVAS_HEIGHT / 2
    p2_y: float = CANVAS_HEIGHT / 2
    target_y: float = CANVAS_HEIGHT / 2      # where the local player wants its paddle
    ball_x: float = FULL_WIDTH / 2
    ball_y: float = CANVAS_HEIGHT / 2
    ball_vel_x: float = BASE_BALL_SPEED
    ball_vel_y: float = BASE_BALL_SPEED * 0.75
    ball_speed_multiplier: float = 1.0
    p1_score: int = 0
    p2_score: int = 0
    winner: int | None = None
    countdown_value: int = 0
    opponent_connected: bool = False

    @property
    def is_authoritative(self) -> bool:
        return self.player == 1

    @property
    def own_paddle_y(self) -> float:
        return self.p1_y if self.player == 1 else self.p2_y

    @property
    def is_loser(self) -> bool:
        return self.winner is not None and self.winner != self.player

    def reset_match(self) -> None:
        """Local reset performed when a (re)armed countdown is first seen."""
        self.game_started = False
        self.winner = None
        self.p1_score = 0
        self.p2_score = 0
        self.ball_speed_multiplier = 1.0
        # Base-speed serve, matching a freshly reset session.
        self.ball_x = FULL_WIDTH / 2
        self.ball_y = CANVAS_HEIGHT / 2
        self.ball_vel_x = BASE_BALL_SPEED
        self.ball_vel_y = BASE_BALL_SPEED * 0.75

    def publish_payload(self) -> dict[str, Any]:
        """Body of the `update` call sent on every tick."""
        payload: dict[str, Any] = {
            "sessionId": self.session_id,
            "player": self.player,
            "paddleY": self.own_paddle_y,
        }
        if self.is_authoritative:
            payload.update(
                {
                    "ballX": self.ball_x,
                    "ballY": self.ball_y,
                    "ballVelX": self.ball_vel_x,
                    "ballVelY": self.ball_vel_y,
                    "ballSpeedMultiplier": self.ball_speed_multiplier,
                    "p1Score": self.p1_score,
                    "p2Score": self.p2_score,
                    "winner": self.winner,
                }
            )
        return payload
