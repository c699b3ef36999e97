"""Collision classifier — canonical ordering of contact pairs.

Pairs are ordered by the ``Category`` integer value
(Ball < Bottom < Block < Paddle < Border), so ``classify(a, b)`` and
``classify(b, a)`` always yield the same event. Two entities of the same
category are ordered by id.
"""

from typing import Optional

from breakout.types import CollisionEvent, Entity, Vec2


def _sort_key(entity: Entity) -> tuple[int, int]:
    return (int(entity.category), entity.id)


def classify(a: Entity, b: Entity, point: Optional[Vec2] = None) -> CollisionEvent:
    """Order two touching entities canonically."""
    low, high = sorted((a, b), key=_sort_key)
    if point is None:
        point = Vec2(
            (a.position.x + b.position.x) / 2,
            (a.position.y + b.position.y) / 2,
        )
    return CollisionEvent(low=low, high=high, point=point)
