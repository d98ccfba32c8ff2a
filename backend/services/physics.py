"""Ball physics run by the authoritative client (player 1). Mirrors the HTML client's stepBall()."""

from __future__ import annotations

import random

from models.client import ClientPhase, ClientState
from models.table import (
    BALL_SIZE,
    BASE_BALL_SPEED,
    CANVAS_HEIGHT,
    FULL_WIDTH,
    PADDLE_HEIGHT,
    PADDLE_SPIN,
    PADDLE_WIDTH,
    SPEED_UP_FACTOR,
    WINNING_SCORE,
)


def clamp_paddle(y: float) -> float:
    half = PADDLE_HEIGHT / 2
    return max(half, min(CANVAS_HEIGHT - half, y))


def paddle_deflection(ball_y: float, paddle_y: float) -> float | None:
    """ballVelY bias for a strike at ball_y, or None when the ball misses the paddle."""
    half = PADDLE_HEIGHT / 2
    if ball_y < paddle_y - half or ball_y > paddle_y + half:
        return None
    return (ball_y - paddle_y) / half * PADDLE_SPIN


def recenter_ball(state: ClientState, rng: random.Random) -> None:
    speed = BASE_BALL_SPEED * state.ball_speed_multiplier
    state.ball_x = FULL_WIDTH / 2
    state.ball_y = CANVAS_HEIGHT / 2
    state.ball_vel_x = (1 if rng.random() > 0.5 else -1) * speed
    state.ball_vel_y = (rng.random() - 0.5) * 1.5 * speed


def winner_for(p1_score: int, p2_score: int) -> int | None:
    if p1_score >= WINNING_SCORE:
        return 1
    if p2_score >= WINNING_SCORE:
        return 2
    return None


def step_ball(state: ClientState, rng: random.Random) -> int | None:
    """
    Advance the ball one tick. Returns the player who scored, if any.

    Wall and paddle bounces force the velocity away from the surface so a ball
    that overshoots in one tick cannot get stuck flipping back and forth.
    """
    state.ball_x += state.ball_vel_x
    state.ball_y += state.ball_vel_y

    if state.ball_y - BALL_SIZE / 2 <= 0:
        state.ball_vel_y = abs(state.ball_vel_y)
    elif state.ball_y + BALL_SIZE / 2 >= CANVAS_HEIGHT:
        state.ball_vel_y = -abs(state.ball_vel_y)

    if state.ball_x - BALL_SIZE / 2 <= PADDLE_WIDTH and state.ball_vel_x < 0:
        bias = paddle_deflection(state.ball_y, state.p1_y)
        if bias is not None:
            state.ball_vel_x = abs(state.ball_vel_x)
            state.ball_vel_y += bias
    if state.ball_x + BALL_SIZE / 2 >= FULL_WIDTH - PADDLE_WIDTH and state.ball_vel_x > 0:
        bias = paddle_deflection(state.ball_y, state.p2_y)
        if bias is not None:
            state.ball_vel_x = -abs(state.ball_vel_x)
            state.ball_vel_y += bias

    if state.ball_x < 0:
        scorer = 2
    elif state.ball_x > FULL_WIDTH:
        scorer = 1
    else:
        return None

    if scorer == 1:
        state.p1_score += 1
    else:
        state.p2_score += 1
    state.ball_speed_multiplier *= SPEED_UP_FACTOR
    recenter_ball(state, rng)
    state.winner = winner_for(state.p1_score, state.p2_score)
    if state.winner is not None:
        state.phase = ClientPhase.GAME_OVER
    return scorer
