"""Reference 2D physics — zero gravity, frictionless, perfectly elastic.

The ball is a circle, paddle and blocks are axis-aligned boxes, the border
is the left, right and top walls, and the bottom edge is a sensor that also
reflects. Contacts are reported when they begin, and only if one body's
contact mask includes the other's category.
"""

import logging
import math
from typing import Optional

from breakout.types import Category, ContactEvent, Entity, Vec2
from breakout.world import World
from breakout import arena

logger = logging.getLogger(__name__)

_BOX_CATEGORIES = (Category.BLOCK, Category.PADDLE)

# Gap (points) beyond which a body no longer counts as touching the ball
CONTACT_SLOP = 1.0


def _reports(a: Entity, b: Entity) -> bool:
    """Contact test: either body's mask names the other's category."""
    return b.category in a.contact_mask or a.category in b.contact_mask


def _reflect(vel: Vec2, nx: float, ny: float) -> Vec2:
    """Reflect ``vel`` about the unit normal (nx, ny) if moving into it."""
    dot = vel.x * nx + vel.y * ny
    if dot >= 0:
        return vel
    return Vec2(vel.x - 2 * dot * nx, vel.y - 2 * dot * ny)


def _check_walls(
    pos: Vec2, vel: Vec2, r: float, width: float, height: float
) -> tuple[Vec2, Vec2, list[tuple[Category, Vec2]]]:
    """Bounce a ball of radius ``r`` off the arena edges.

    Returns the new position, the new velocity and (category, contact point)
    for each edge hit.
    """
    x, y = pos.x, pos.y
    hits: list[tuple[Category, Vec2]] = []

    if x - r < 0 and vel.x < 0:
        x = r
        vel = Vec2(-vel.x, vel.y)
        hits.append((Category.BORDER, Vec2(0.0, y)))
    elif x + r > width and vel.x > 0:
        x = width - r
        vel = Vec2(-vel.x, vel.y)
        hits.append((Category.BORDER, Vec2(width, y)))

    if y + r > height and vel.y > 0:
        y = height - r
        vel = Vec2(vel.x, -vel.y)
        hits.append((Category.BORDER, Vec2(x, height)))
    elif y - r < 0 and vel.y < 0:
        y = r
        vel = Vec2(vel.x, -vel.y)
        hits.append((Category.BOTTOM, Vec2(x, 0.0)))

    return Vec2(x, y), vel, hits


def _edge_gap(pos: Vec2, r: float, category: Category, width: float, height: float) -> float:
    """Distance between the ball's surface and the nearest edge of ``category``."""
    if category == Category.BOTTOM:
        return pos.y - r
    return min(pos.x - r, width - r - pos.x, height - r - pos.y)


def _box_gap(pos: Vec2, r: float, box: Entity) -> float:
    """Distance between the ball's surface and ``box``; negative on overlap."""
    cx = min(max(pos.x, box.position.x - box.half_width), box.position.x + box.half_width)
    cy = min(max(pos.y, box.position.y - box.half_height), box.position.y + box.half_height)
    return math.hypot(pos.x - cx, pos.y - cy) - r


def _check_box(
    pos: Vec2, vel: Vec2, r: float, box: Entity
) -> tuple[Vec2, Vec2, Optional[Vec2]]:
    """Resolve circle-vs-box overlap.

    Returns the new position, the new velocity and the contact point, or
    ``None`` as the point when the ball does not touch the box.
    """
    left = box.position.x - box.half_width
    right = box.position.x + box.half_width
    bottom = box.position.y - box.half_height
    top = box.position.y + box.half_height

    cx = min(max(pos.x, left), right)
    cy = min(max(pos.y, bottom), top)
    dx = pos.x - cx
    dy = pos.y - cy
    dist2 = dx * dx + dy * dy

    if dist2 >= r * r:
        return pos, vel, None

    if dist2 > 1e-12:
        dist = math.sqrt(dist2)
        nx, ny = dx / dist, dy / dist
        pos = Vec2(cx + nx * r, cy + ny * r)
    else:
        # Center inside the box: push out along the axis of least penetration
        pens = {
            (-1.0, 0.0): pos.x - left,
            (1.0, 0.0): right - pos.x,
            (0.0, -1.0): pos.y - bottom,
            (0.0, 1.0): top - pos.y,
        }
        (nx, ny), _ = min(pens.items(), key=lambda kv: kv[1])
        if nx:
            pos = Vec2((right if nx > 0 else left) + nx * r, pos.y)
        else:
            pos = Vec2(pos.x, (top if ny > 0 else bottom) + ny * r)

    return pos, _reflect(vel, nx, ny), Vec2(cx, cy)


class ArcadePhysics:
    """Headless implementation of the ``PhysicsWorld`` protocol.

    Reads and moves the entities of ``world`` directly; entities removed
    from the world vanish from the simulation on the next tick.

    A body stays in contact with the ball until the gap between them grows
    beyond ``CONTACT_SLOP``; only the start of a contact is reported.
    """

    def __init__(self, world: World):
        self.world = world
        self._velocity: dict[int, Vec2] = {}
        self._damping: dict[int, float] = {}
        self._touching: set[int] = set()

    def velocity(self, entity_id: int) -> Vec2:
        return self._velocity.get(entity_id, Vec2())

    def set_velocity(self, entity_id: int, velocity: Vec2) -> None:
        entity = self.world.get(entity_id)
        if entity is None or not entity.dynamic:
            logger.debug("set_velocity: no dynamic body %s", entity_id)
            return
        self._velocity[entity_id] = velocity

    def set_linear_damping(self, entity_id: int, damping: float) -> None:
        self._damping[entity_id] = max(0.0, damping)

    def apply_impulse(self, entity_id: int, impulse: Vec2) -> None:
        entity = self.world.get(entity_id)
        if entity is None or not entity.dynamic:
            logger.debug("apply_impulse: no dynamic body %s", entity_id)
            return
        vel = self._velocity.get(entity_id, Vec2())
        self._velocity[entity_id] = vel + impulse * (1.0 / arena.BALL_MASS)

    def set_position(self, entity_id: int, point: Vec2) -> None:
        entity = self.world.get(entity_id)
        if entity is None:
            logger.debug("set_position: no body %s", entity_id)
            return
        entity.position = point

    def _begin(self, entity_id: int) -> bool:
        """Mark ``entity_id`` as touching; True if the contact just began."""
        if entity_id in self._touching:
            return False
        self._touching.add(entity_id)
        return True

    def tick(self, dt: float) -> list[ContactEvent]:
        """Advance the ball by ``dt`` and return the contacts that began."""
        if dt < 0:
            raise ValueError(f"dt must be non-negative, got {dt}")

        ball = self.world.ball
        if ball is None or dt == 0:
            return []

        self._touching = {i for i in self._touching if i in self.world}

        vel = self._velocity.get(ball.id, Vec2())
        damping = self._damping.get(ball.id, 0.0)
        if damping:
            vel = vel * max(0.0, 1.0 - damping * dt)

        r = ball.half_width
        width, height = self.world.width, self.world.height

        # Never move more than half a radius per sub-step
        max_step = r * 0.5
        steps = max(1, math.ceil(vel.magnitude() * dt / max_step))
        h = dt / steps

        edges = [
            e for e in (self.world.first_of(Category.BORDER), self.world.first_of(Category.BOTTOM))
            if e is not None
        ]

        contacts: list[ContactEvent] = []
        for _ in range(steps):
            pos = ball.position + vel * h

            pos, vel, hits = _check_walls(pos, vel, r, width, height)
            for category, point in hits:
                for edge in edges:
                    if edge.category != category:
                        continue
                    if self._begin(edge.id) and _reports(ball, edge):
                        contacts.append(ContactEvent(ball.id, edge.id, point))

            for box in self.world.entities():
                if box.category not in _BOX_CATEGORIES:
                    continue
                pos, vel, point = _check_box(pos, vel, r, box)
                if point is not None:
                    if self._begin(box.id) and _reports(ball, box):
                        contacts.append(ContactEvent(box.id, ball.id, point))

            ball.position = pos

            for edge in edges:
                if _edge_gap(pos, r, edge.category, width, height) > CONTACT_SLOP:
                    self._touching.discard(edge.id)
            for box in self.world.entities():
                if box.category in _BOX_CATEGORIES and _box_gap(pos, r, box) > CONTACT_SLOP:
                    self._touching.discard(box.id)

        self._velocity[ball.id] = vel
        return contacts
