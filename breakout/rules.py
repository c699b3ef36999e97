"""Rule engine — maps classified collisions to gameplay effects.

Rules only fire while the game is Playing; contacts reported in any other
state (for example a late contact from the session that just ended) are
ignored.

Rule table (canonical pair -> effect):
- (Ball, Border): bounce sound
- (Ball, Paddle): paddle bounce sound
- (Ball, Bottom): game over, lost
- (Ball, Block):  break the block, then game over, won, if none remain
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from breakout.types import (
    Category,
    CollisionEvent,
    DestroyEntity,
    GameState,
    PlaySound,
    SpawnParticle,
)
from breakout.world import World
from breakout import arena

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """Effects of one collision: commands plus an optional transition."""
    commands: list = field(default_factory=list)
    transition: Optional[GameState] = None
    won: Optional[bool] = None


def _sound(profile: dict, sound_id: str) -> list:
    return [PlaySound(sound_id)] if profile["sounds"] else []


def _ball_border(event: CollisionEvent, world: World, profile: dict) -> Resolution:
    return Resolution(commands=_sound(profile, arena.SOUND_BORDER_BOUNCE))


def _ball_paddle(event: CollisionEvent, world: World, profile: dict) -> Resolution:
    return Resolution(commands=_sound(profile, arena.SOUND_PADDLE_BOUNCE))


def _ball_bottom(event: CollisionEvent, world: World, profile: dict) -> Resolution:
    return Resolution(transition=GameState.GAME_OVER, won=False)


def _ball_block(event: CollisionEvent, world: World, profile: dict) -> Resolution:
    """Break the block and check for a win in the same step."""
    block = world.remove(event.high.id)
    if block is None:
        # Duplicate contact for a block broken earlier in this tick
        logger.debug("block %s already broken", event.high.id)
        return Resolution()

    commands = _sound(profile, arena.SOUND_BLOCK_BREAK)
    commands.append(SpawnParticle(arena.PARTICLE_BLOCK_BREAK, block.position.copy()))
    commands.append(DestroyEntity(block.id))

    if is_game_won(world):
        return Resolution(commands=commands, transition=GameState.GAME_OVER, won=True)
    return Resolution(commands=commands)


RuleFn = Callable[[CollisionEvent, World, dict], Resolution]

RULES: dict[tuple[Category, Category], RuleFn] = {
    (Category.BALL, Category.BORDER): _ball_border,
    (Category.BALL, Category.PADDLE): _ball_paddle,
    (Category.BALL, Category.BOTTOM): _ball_bottom,
    (Category.BALL, Category.BLOCK): _ball_block,
}


def is_game_won(world: World) -> bool:
    """The game is won once no blocks remain."""
    return world.block_count() == 0


def resolve_collision(
    state: GameState,
    event: CollisionEvent,
    world: World,
    profile: dict,
) -> Resolution:
    """Apply the rule for ``event`` if the game is currently Playing.

    Pairs without a rule (e.g. Block/Block) resolve to nothing.
    """
    if state != GameState.PLAYING:
        return Resolution()

    rule = RULES.get(event.pair)
    if rule is None:
        return Resolution()
    return rule(event, world, profile)
