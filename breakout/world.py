"""World model — owns every entity in the arena, indexed by id."""

import itertools
import logging
from typing import Iterator, Optional

from breakout.types import Category, Entity, Vec2
from breakout import arena

logger = logging.getLogger(__name__)


class World:
    """Entity store for one session.

    Lookups return ``None`` for unknown ids instead of raising, so rules
    that refer to an already removed entity degrade to a no-op.
    """

    def __init__(self, width: float = arena.ARENA_WIDTH, height: float = arena.ARENA_HEIGHT):
        self.width = width
        self.height = height
        self._entities: dict[int, Entity] = {}
        self._ids = itertools.count(1)

    def add(
        self,
        category: Category,
        position: Vec2,
        size: Vec2,
        dynamic: bool = False,
        contact_mask: frozenset = frozenset(),
    ) -> Entity:
        entity = Entity(
            id=next(self._ids),
            category=category,
            position=position,
            size=size,
            dynamic=dynamic,
            contact_mask=contact_mask,
        )
        self._entities[entity.id] = entity
        return entity

    def get(self, entity_id: int) -> Optional[Entity]:
        return self._entities.get(entity_id)

    def remove(self, entity_id: int) -> Optional[Entity]:
        """Remove and return an entity, or ``None`` if it is already gone."""
        entity = self._entities.pop(entity_id, None)
        if entity is None:
            logger.debug("remove: entity %s already gone", entity_id)
        return entity

    def __contains__(self, entity_id: int) -> bool:
        return entity_id in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    def entities(self) -> Iterator[Entity]:
        return iter(list(self._entities.values()))

    def of_category(self, category: Category) -> list[Entity]:
        return [e for e in self._entities.values() if e.category == category]

    def first_of(self, category: Category) -> Optional[Entity]:
        for e in self._entities.values():
            if e.category == category:
                return e
        return None

    @property
    def ball(self) -> Optional[Entity]:
        return self.first_of(Category.BALL)

    @property
    def paddle(self) -> Optional[Entity]:
        return self.first_of(Category.PADDLE)

    def blocks(self) -> list[Entity]:
        return self.of_category(Category.BLOCK)

    def block_count(self) -> int:
        return sum(1 for e in self._entities.values() if e.category == Category.BLOCK)

    def body_at(self, point: Vec2) -> Optional[Entity]:
        """Return the topmost movable or breakable body containing ``point``.

        Border and Bottom span the whole arena and are never returned.
        """
        for e in self._entities.values():
            if e.category in (Category.BORDER, Category.BOTTOM):
                continue
            if e.contains(point):
                return e
        return None

    def clamp_point(self, point: Vec2) -> Vec2:
        """Project a point into the arena bounds."""
        return Vec2(
            min(max(point.x, 0.0), self.width),
            min(max(point.y, 0.0), self.height),
        )


def add_blocks(world: World, count: int, stacked: bool = False) -> list[Entity]:
    """Lay out ``count`` blocks centered horizontally near the top.

    With ``stacked`` a second row is placed directly above each block.
    """
    total_width = arena.BLOCK_WIDTH * count
    x_offset = (world.width - total_width) / 2
    rows = [0.0, arena.STACK_ADJUSTMENT] if stacked else [0.0]

    blocks = []
    for i in range(count):
        x = x_offset + (i + 0.5) * arena.BLOCK_WIDTH
        for adjustment in rows:
            blocks.append(world.add(
                Category.BLOCK,
                Vec2(x, world.height * (arena.BLOCK_ROW + adjustment)),
                Vec2(arena.BLOCK_WIDTH, arena.BLOCK_HEIGHT),
            ))
    return blocks


def build_world(profile: dict) -> World:
    """Build a fresh world for a new session from a configuration profile."""
    world = World()

    world.add(
        Category.BORDER,
        Vec2(world.width / 2, world.height / 2),
        Vec2(world.width, world.height),
    )
    world.add(
        Category.BOTTOM,
        Vec2(world.width / 2, 0.0),
        Vec2(world.width, 0.0),
    )
    world.add(
        Category.PADDLE,
        Vec2(world.width / 2, arena.PADDLE_Y),
        Vec2(arena.PADDLE_WIDTH, arena.PADDLE_HEIGHT),
    )
    world.add(
        Category.BALL,
        Vec2(world.width / 2, arena.BALL_START_Y),
        Vec2(arena.BALL_RADIUS * 2, arena.BALL_RADIUS * 2),
        dynamic=True,
        contact_mask=profile["ball_contacts"],
    )
    add_blocks(world, profile["block_count"], stacked=profile["stacked"])

    logger.debug("built world with %d entities (%d blocks)", len(world), world.block_count())
    return world
