"""The HTML/JS client served on GET. Table constants are filled in from models.table."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from models import table

_PAGE_PATH = Path(__file__).parent / "static" / "index.html"


def _placeholders() -> dict[str, str]:
    return {
        "FULL_WIDTH": str(table.FULL_WIDTH),
        "CANVAS_WIDTH": str(table.CANVAS_WIDTH),
        "CANVAS_HEIGHT": str(table.CANVAS_HEIGHT),
        "PADDLE_WIDTH": str(table.PADDLE_WIDTH),
        "PADDLE_HEIGHT": str(table.PADDLE_HEIGHT),
        "BALL_SIZE": str(table.BALL_SIZE),
        "BASE_BALL_SPEED": str(table.BASE_BALL_SPEED),
        "SPEED_UP_FACTOR": str(table.SPEED_UP_FACTOR),
        "PADDLE_SPIN": str(table.PADDLE_SPIN),
        "WINNING_SCORE": str(table.WINNING_SCORE),
        "TICK_MS": str(int(table.TICK_SECONDS * 1000)),
    }


@lru_cache(maxsize=1)
def render_client_page() -> str:
    html = _PAGE_PATH.read_text(encoding="utf-8")
    for name, value in _placeholders().items():
        html = html.replace("{{" + name + "}}", value)
    return html
