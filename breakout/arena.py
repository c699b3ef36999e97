"""Arena dimensions, gameplay constants and configuration profiles.

All distances are in arena points, time in seconds. The origin is the
bottom-left corner of the arena and y grows upwards.
"""

from breakout.types import Category

# Arena
ARENA_WIDTH = 768.0
ARENA_HEIGHT = 1024.0

# Paddle: vertical position is fixed
PADDLE_WIDTH = 150.0
PADDLE_HEIGHT = 30.0
PADDLE_Y = 100.0

# Ball
BALL_RADIUS = 16.0
BALL_MASS = 0.01  # an impulse of 3.0 gives 300 pt/s on that axis
BALL_START_Y = 180.0

# Blocks
BLOCK_WIDTH = 64.0
BLOCK_HEIGHT = 32.0
BLOCK_ROW = 0.8  # fraction of arena height for the first row
STACK_ADJUSTMENT = 0.1  # the stacked row sits this much higher

# Ball speed control while playing
IMPULSE_SPEED_FACTOR = 3.0
MAX_SPEED = 400.0
MIN_AXIS_SPEED = 10.0
OVERSPEED_DAMPING = 0.4
GAME_OVER_DAMPING = 1.0

# Sound ids
SOUND_BORDER_BOUNCE = "pongblip"
SOUND_PADDLE_BOUNCE = "paddleBlip"
SOUND_BLOCK_BREAK = "BambooBreak"
SOUND_GAME_WON = "game-won"
SOUND_GAME_OVER = "game-over"

# Particle effect ids
PARTICLE_BLOCK_BREAK = "BrokenPlatform"
PARTICLE_BALL_TRAIL = "SnowTrail"

_ALL_CONTACTS = frozenset({
    Category.BOTTOM,
    Category.BLOCK,
    Category.BORDER,
    Category.PADDLE,
})

PROFILES = {
    "basic": {
        "label": "Basic (8 blocks, silent)",
        "block_count": 8,
        "stacked": False,
        "sounds": False,
        "trail": False,
        "ball_contacts": frozenset({Category.BOTTOM, Category.BLOCK}),
    },
    "enhanced": {
        "label": "Enhanced (16 blocks, sound, trail)",
        "block_count": 8,
        "stacked": True,
        "sounds": True,
        "trail": True,
        "ball_contacts": _ALL_CONTACTS,
    },
}

DEFAULT_PROFILE = "enhanced"


def get_profile(key: str = DEFAULT_PROFILE) -> dict:
    """Return the profile dict for ``key``."""
    return PROFILES[key]


def list_profiles() -> list[str]:
    """Return all available profile keys."""
    return list(PROFILES.keys())


def initial_block_count(profile: dict) -> int:
    """Number of blocks a fresh world built from ``profile`` starts with."""
    rows = 2 if profile["stacked"] else 1
    return profile["block_count"] * rows


def clamp_paddle_x(
    x: float, paddle_width: float = PADDLE_WIDTH, arena_width: float = ARENA_WIDTH
) -> float:
    """Keep the paddle fully inside the arena horizontally."""
    half = paddle_width / 2
    return min(max(x, half), arena_width - half)
