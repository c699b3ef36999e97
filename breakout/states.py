"""Game state machine — WaitingForTap, Playing, GameOver.

Legal transitions:
- WaitingForTap -> Playing   (tap)
- Playing       -> GameOver  (ball hits bottom, or last block broken)

GameOver is terminal for a session; leaving it means rebuilding the whole
session, which the session object does rather than this machine. Any other
request is rejected and changes nothing.
"""

import logging
import random
from dataclasses import dataclass
from typing import Optional

from breakout.types import (
    ApplyImpulse,
    GameState,
    PlaySound,
    SetLinearDamping,
    SetVelocity,
    ShowEndScreen,
    ShowTapPrompt,
    TransitionState,
    Vec2,
)
from breakout.world import World
from breakout import arena

logger = logging.getLogger(__name__)

TRANSITIONS = {
    GameState.WAITING_FOR_TAP: frozenset({GameState.PLAYING}),
    GameState.PLAYING: frozenset({GameState.GAME_OVER}),
    GameState.GAME_OVER: frozenset(),
}


@dataclass
class ActiveState:
    """The current state and the data that only makes sense inside it."""
    kind: GameState
    elapsed: float = 0.0
    won: Optional[bool] = None  # GameOver only
    damping: float = 0.0        # Playing only: last damping sent to the ball


class StateMachine:
    """Holds the active state and produces the commands of each transition.

    The machine keeps a non-owning reference to the session's world so its
    hooks can address the ball; it never adds or removes entities.
    """

    def __init__(self, world: World, profile: dict, rng: Optional[random.Random] = None):
        self.world = world
        self.profile = profile
        self._rng = rng if rng is not None else random.Random()
        self.current = ActiveState(GameState.WAITING_FOR_TAP)
        self.outcome: Optional[bool] = None

    @property
    def state(self) -> GameState:
        return self.current.kind

    # --- Input/collision policy ---

    @property
    def handles_taps(self) -> bool:
        return self.state in (GameState.WAITING_FOR_TAP, GameState.GAME_OVER)

    @property
    def handles_collisions(self) -> bool:
        return self.state == GameState.PLAYING

    @property
    def accepts_drags(self) -> bool:
        return self.state == GameState.PLAYING

    # --- Transitions ---

    def can_enter(self, target: GameState) -> bool:
        return target in TRANSITIONS[self.state]

    def start(self) -> list:
        """Commands for entering the initial state of a fresh session."""
        return self._on_enter(self.state)

    def enter(self, target: GameState, won: Optional[bool] = None) -> list:
        """Move to ``target`` if the edge is legal.

        Entering GameOver requires ``won``. Returns the exit/enter commands,
        or an empty list when the request is rejected.
        """
        if not self.can_enter(target):
            logger.debug("rejected transition %s -> %s", self.state.value, target.value)
            return []
        if target == GameState.GAME_OVER and won is None:
            logger.debug("rejected transition to game_over without an outcome")
            return []

        previous = self.state
        commands = self._on_exit(previous)

        self.current = ActiveState(target)
        if target == GameState.GAME_OVER:
            self.current.won = won
            self.outcome = won

        logger.info("state %s -> %s", previous.value, target.value)
        commands.append(TransitionState(previous, target))
        commands.extend(self._on_enter(target))
        return commands

    def update(self, dt: float, physics) -> list:
        """Per-frame hook of the active state."""
        self.current.elapsed += dt
        if self.state == GameState.PLAYING:
            return self._update_playing(physics)
        return []

    # --- Per-state hooks ---

    def _on_enter(self, kind: GameState) -> list:
        ball = self.world.ball

        if kind == GameState.WAITING_FOR_TAP:
            return [ShowTapPrompt(True)]

        if kind == GameState.PLAYING:
            if ball is None:
                return []
            impulse = Vec2(self._random_direction(), self._random_direction())
            return [ApplyImpulse(ball.id, impulse)]

        if kind == GameState.GAME_OVER:
            commands: list = []
            if ball is not None:
                commands.append(SetVelocity(ball.id, Vec2()))
                commands.append(SetLinearDamping(ball.id, arena.GAME_OVER_DAMPING))
            if self.profile["sounds"]:
                sound = arena.SOUND_GAME_WON if self.current.won else arena.SOUND_GAME_OVER
                commands.append(PlaySound(sound))
            commands.append(ShowEndScreen(bool(self.current.won)))
            return commands

        return []

    def _on_exit(self, kind: GameState) -> list:
        if kind == GameState.WAITING_FOR_TAP:
            return [ShowTapPrompt(False)]
        return []

    def _update_playing(self, physics) -> list:
        """Keep the ball lively: unstick slow axes, damp when too fast."""
        ball = self.world.ball
        if ball is None:
            return []

        commands: list = []
        vel = physics.velocity(ball.id)

        if abs(vel.x) <= arena.MIN_AXIS_SPEED:
            commands.append(ApplyImpulse(ball.id, Vec2(self._random_direction(), 0.0)))
        if abs(vel.y) <= arena.MIN_AXIS_SPEED:
            commands.append(ApplyImpulse(ball.id, Vec2(0.0, self._random_direction())))

        damping = arena.OVERSPEED_DAMPING if vel.magnitude() > arena.MAX_SPEED else 0.0
        if damping != self.current.damping:
            self.current.damping = damping
            commands.append(SetLinearDamping(ball.id, damping))

        return commands

    def _random_direction(self) -> float:
        factor = arena.IMPULSE_SPEED_FACTOR
        return -factor if self._rng.uniform(0.0, 100.0) >= 50 else factor
