from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from .table import BASE_BALL_SPEED, CANVAS_HEIGHT, FULL_WIDTH

# Fields that may legitimately be written as null by a client patch.
NULLABLE_FIELDS = frozenset({"winner", "countdown_start_time"})


class PongSession(BaseModel):
    """
    Complete state of one match as stored in Redis.

    Python attributes are snake_case; the stored JSON and the HTTP payloads use
    the camelCase aliases the browser client reads. Timestamps are epoch ms.
    """

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    ball_x: float = Field(default=FULL_WIDTH / 2, alias="ballX")
    ball_y: float = Field(default=CANVAS_HEIGHT / 2, alias="ballY")
    ball_vel_x: float = Field(default=BASE_BALL_SPEED, alias="ballVelX")
    ball_vel_y: float = Field(default=BASE_BALL_SPEED * 0.75, alias="ballVelY")
    ball_speed_multiplier: float = Field(default=1.0, alias="ballSpeedMultiplier")
    p1_y: float = Field(default=CANVAS_HEIGHT / 2, alias="p1Y")
    p2_y: float = Field(default=CANVAS_HEIGHT / 2, alias="p2Y")
    p1_score: int = Field(default=0, ge=0, alias="p1Score")
    p2_score: int = Field(default=0, ge=0, alias="p2Score")
    game_started: bool = Field(default=False, alias="gameStarted")
    winner: Literal[1, 2] | None = None
    countdown_active: bool = Field(default=False, alias="countdownActive")
    countdown_value: int = Field(default=0, ge=0, alias="countdownValue")
    countdown_start_time: int | None = Field(default=None, alias="countdownStartTime")
    ready_to_start: bool = Field(default=False, alias="readyToStart")
    last_update: int = Field(default=0, alias="lastUpdate")
    p1_connected: bool = Field(default=True, alias="p1Connected")
    p2_connected: bool = Field(default=False, alias="p2Connected")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)

    @classmethod
    def from_wire(cls, payload: dict[str, Any]) -> PongSession:
        return cls.model_validate(payload)


class SessionPatch(BaseModel):
    """
    Sparse `update` body. Only keys the client actually sent are applied.

    `player` + `paddleY` is the shorthand both clients use for their own paddle;
    every other key maps one-to-one onto a PongSession field.
    """

    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    session_id: str | None = Field(default=None, alias="sessionId")
    player: Literal[1, 2] | None = None
    paddle_y: float | None = Field(default=None, alias="paddleY")

    ball_x: float | None = Field(default=None, alias="ballX")
    ball_y: float | None = Field(default=None, alias="ballY")
    ball_vel_x: float | None = Field(default=None, alias="ballVelX")
    ball_vel_y: float | None = Field(default=None, alias="ballVelY")
    ball_speed_multiplier: float | None = Field(default=None, alias="ballSpeedMultiplier")
    p1_y: float | None = Field(default=None, alias="p1Y")
    p2_y: float | None = Field(default=None, alias="p2Y")
    p1_score: int | None = Field(default=None, ge=0, alias="p1Score")
    p2_score: int | None = Field(default=None, ge=0, alias="p2Score")
    game_started: bool | None = Field(default=None, alias="gameStarted")
    winner: Literal[1, 2] | None = None
    countdown_active: bool | None = Field(default=None, alias="countdownActive")
    countdown_value: int | None = Field(default=None, ge=0, alias="countdownValue")
    countdown_start_time: int | None = Field(default=None, alias="countdownStartTime")
    ready_to_start: bool | None = Field(default=None, alias="readyToStart")
    p1_connected: bool | None = Field(default=None, alias="p1Connected")
    p2_connected: bool | None = Field(default=None, alias="p2Connected")

    def session_fields(self) -> dict[str, Any]:
        """Fields present in the request that target PongSession directly."""
        sent = self.model_dump(exclude_unset=True)
        for key in ("session_id", "player", "paddle_y"):
            sent.pop(key, None)
        return {
            name: value
            for name, value in sent.items()
            if value is not None or name in NULLABLE_FIELDS
        }
