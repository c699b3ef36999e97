"""Autopilot — a scripted player that drives a session through pointer events.

It taps to start, grabs the paddle, and drags it under the ball with a
style-dependent reaction delay, speed limit and aiming error.
"""

import random
from collections import deque
from typing import Optional

from breakout.types import GameState, PointerDown, PointerMove, PointerUp, Vec2
from breakout.world import World

# Pilot style presets
PILOT_STYLES = {
    "perfect": {
        "label": "Perfect",
        "reaction": 0.0,      # seconds of lag on the ball position
        "max_speed": 2000.0,  # paddle points per second
        "jitter": 0.0,        # max aiming error in points
    },
    "steady": {
        "label": "Steady",
        "reaction": 0.05,
        "max_speed": 800.0,
        "jitter": 25.0,
    },
    "casual": {
        "label": "Casual",
        "reaction": 0.15,
        "max_speed": 450.0,
        "jitter": 50.0,
    },
    "sloppy": {
        "label": "Sloppy",
        "reaction": 0.35,
        "max_speed": 250.0,
        "jitter": 90.0,
    },
}

_AIM_INTERVAL = 0.5  # seconds between new aiming errors


class Autopilot:
    """Produces the pointer events of one frame for a headless session."""

    def __init__(self, name: str, style: str, rng: Optional[random.Random] = None):
        preset = PILOT_STYLES[style]
        self.name = name
        self.style = style
        self.label = preset["label"]
        self.reaction = preset["reaction"]
        self.max_speed = preset["max_speed"]
        self.jitter = preset["jitter"]
        self._rng = rng if rng is not None else random.Random()
        self.reset()

    def reset(self) -> None:
        self._holding = False
        self._seen: deque = deque()
        self._aim = 0.0
        self._aim_timer = 0.0

    def events(self, world: World, state: GameState, dt: float) -> list:
        paddle = world.paddle
        if paddle is None:
            return []
        grip = Vec2(paddle.position.x, paddle.position.y)

        if state == GameState.WAITING_FOR_TAP:
            self._holding = True
            return [PointerDown(grip)]

        if state == GameState.GAME_OVER:
            if self._holding:
                self._holding = False
                return [PointerUp(grip)]
            return []

        events: list = []
        if not self._holding:
            self._holding = True
            events.append(PointerDown(grip))

        target = self._target_x(world, dt)
        if target is None:
            return events

        max_step = self.max_speed * dt
        dx = max(-max_step, min(max_step, target - grip.x))
        if dx:
            events.append(PointerMove(grip, Vec2(grip.x + dx, grip.y)))
        return events

    def _target_x(self, world: World, dt: float) -> Optional[float]:
        """Ball x as seen ``reaction`` seconds ago, plus the aiming error."""
        ball = world.ball
        if ball is None:
            return None

        self._seen.append(ball.position.x)
        lag_frames = int(round(self.reaction / dt)) if dt > 0 else 0
        while len(self._seen) > lag_frames + 1:
            self._seen.popleft()

        self._aim_timer -= dt
        if self._aim_timer <= 0:
            self._aim = self._rng.uniform(-self.jitter, self.jitter) if self.jitter else 0.0
            self._aim_timer = _AIM_INTERVAL

        return self._seen[0] + self._aim
