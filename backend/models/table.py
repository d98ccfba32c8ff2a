"""Table geometry and match rules shared by the server, the Python client and the HTML page."""

FULL_WIDTH = 800               # both half-tables side by side
CANVAS_WIDTH = 400             # one player's half of the table
CANVAS_HEIGHT = 600
PADDLE_WIDTH = 20
PADDLE_HEIGHT = 100
BALL_SIZE = 16

BASE_BALL_SPEED = 10.0
SPEED_UP_FACTOR = 1.5          # applied to ballSpeedMultiplier after every point
PADDLE_SPIN = 2.0              # ballVelY bias at the very edge of a paddle

WINNING_SCORE = 3
COUNTDOWN_SECONDS = 3
TICK_SECONDS = 0.05            # physics/publish and poll cadence (50 ms)
