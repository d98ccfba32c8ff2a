import random

import pytest

from models import ClientPhase, ClientState
from models.table import (
    BASE_BALL_SPEED,
    CANVAS_HEIGHT,
    FULL_WIDTH,
    PADDLE_HEIGHT,
    PADDLE_WIDTH,
    SPEED_UP_FACTOR,
    WINNING_SCORE,
)
from services.physics import clamp_paddle, paddle_deflection, step_ball, winner_for


def _state(**overrides) -> ClientState:
    state = ClientState(player=1, phase=ClientPhase.PLAYING, game_started=True)
    for name, value in overrides.items():
        setattr(state, name, value)
    return state


@pytest.mark.parametrize(
    ("y", "expected"),
    [(-40, PADDLE_HEIGHT / 2), (300, 300), (CANVAS_HEIGHT + 10, CANVAS_HEIGHT - PADDLE_HEIGHT / 2)],
)
def test_clamp_paddle(y: float, expected: float) -> None:
    assert clamp_paddle(y) == expected


def test_paddle_deflection_window() -> None:
    assert paddle_deflection(300, 300) == 0
    assert paddle_deflection(350, 300) == pytest.approx(2.0)
    assert paddle_deflection(250, 300) == pytest.approx(-2.0)
    assert paddle_deflection(351, 300) is None


def test_ball_moves_by_velocity() -> None:
    state = _state(ball_x=400, ball_y=300, ball_vel_x=10, ball_vel_y=5)
    assert step_ball(state, random.Random(1)) is None
    assert (state.ball_x, state.ball_y) == (410, 305)


def test_ball_reflects_off_top_and_bottom_walls() -> None:
    state = _state(ball_x=400, ball_y=10, ball_vel_x=0, ball_vel_y=-5)
    step_ball(state, random.Random(1))
    assert state.ball_vel_y == 5

    state = _state(ball_x=400, ball_y=CANVAS_HEIGHT - 10, ball_vel_x=0, ball_vel_y=5)
    step_ball(state, random.Random(1))
    assert state.ball_vel_y == -5


def test_ball_bounces_off_player_one_paddle_with_spin() -> None:
    state = _state(ball_x=PADDLE_WIDTH + 15, ball_y=325, ball_vel_x=-10, ball_vel_y=0, p1_y=300)
    step_ball(state, random.Random(1))
    assert state.ball_vel_x == 10
    assert state.ball_vel_y == pytest.approx(1.0)


def test_ball_bounces_off_player_two_paddle() -> None:
    state = _state(ball_x=FULL_WIDTH - PADDLE_WIDTH - 15, ball_y=300, ball_vel_x=10, ball_vel_y=0, p2_y=300)
    step_ball(state, random.Random(1))
    assert state.ball_vel_x == -10


def test_missed_ball_scores_and_speeds_up() -> None:
    state = _state(ball_x=5, ball_y=300, ball_vel_x=-10, ball_vel_y=0, p1_y=50)
    scorer = step_ball(state, random.Random(7))

    assert scorer == 2
    assert state.p2_score == 1
    assert state.ball_speed_multiplier == SPEED_UP_FACTOR
    assert (state.ball_x, state.ball_y) == (FULL_WIDTH / 2, CANVAS_HEIGHT / 2)
    assert abs(state.ball_vel_x) == BASE_BALL_SPEED * SPEED_UP_FACTOR
    assert abs(state.ball_vel_y) <= BASE_BALL_SPEED * 0.75 * SPEED_UP_FACTOR
    assert state.winner is None


def test_reaching_winning_score_ends_game() -> None:
    state = _state(ball_x=FULL_WIDTH - 5, ball_y=300, ball_vel_x=10, ball_vel_y=0, p2_y=50, p1_score=WINNING_SCORE - 1)
    assert step_ball(state, random.Random(3)) == 1
    assert state.winner == 1
    assert state.phase is ClientPhase.GAME_OVER


def test_winner_for() -> None:
    assert winner_for(0, 0) is None
    assert winner_for(WINNING_SCORE, 1) == 1
    assert winner_for(2, WINNING_SCORE) == 2
