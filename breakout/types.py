"""Core data types for the breakout game core."""

import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import FrozenSet, Optional, Union


@dataclass(frozen=True)
class Vec2:
    """Immutable 2D vector in arena space (origin bottom-left, y up)."""
    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    def __rmul__(self, scalar: float) -> "Vec2":
        return self.__mul__(scalar)

    def magnitude(self) -> float:
        return (self.x**2 + self.y**2) ** 0.5

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def copy(self) -> "Vec2":
        return Vec2(self.x, self.y)


class Category(IntEnum):
    """Collision category of an entity.

    The integer values define the canonical total order used by the
    collision classifier: Ball < Bottom < Block < Paddle < Border.
    """
    BALL = 0
    BOTTOM = 1
    BLOCK = 2
    PADDLE = 3
    BORDER = 4


class GameState(Enum):
    """The three game states. Exactly one is active at a time."""
    WAITING_FOR_TAP = "waiting_for_tap"
    PLAYING = "playing"
    GAME_OVER = "game_over"


@dataclass
class Entity:
    """A physical object in the arena.

    ``position`` is the center of the body; ``size`` is its full extent
    (for the ball, width == height == diameter). Border and Bottom span
    the arena and are described by their bounding box.
    """
    id: int
    category: Category
    position: Vec2
    size: Vec2
    dynamic: bool = False
    contact_mask: FrozenSet[Category] = field(default_factory=frozenset)

    @property
    def half_width(self) -> float:
        return self.size.x / 2

    @property
    def half_height(self) -> float:
        return self.size.y / 2

    def contains(self, point: Vec2) -> bool:
        """True if ``point`` lies inside the entity's bounding box."""
        return (
            abs(point.x - self.position.x) <= self.half_width
            and abs(point.y - self.position.y) <= self.half_height
        )


@dataclass
class ContactEvent:
    """Raw contact reported by the physics world for one tick."""
    body_a: int
    body_b: int
    point: Vec2


@dataclass
class CollisionEvent:
    """A contact normalized so that ``low.category <= high.category``."""
    low: Entity
    high: Entity
    point: Vec2

    @property
    def pair(self) -> tuple[Category, Category]:
        return (self.low.category, self.high.category)


# --- Pointer input (arena coordinates) ---


@dataclass
class PointerDown:
    pos: Vec2


@dataclass
class PointerMove:
    start: Vec2
    end: Vec2


@dataclass
class PointerUp:
    pos: Optional[Vec2] = None


PointerEvent = Union[PointerDown, PointerMove, PointerUp]


# --- Commands emitted by the core ---


@dataclass(frozen=True)
class PlaySound:
    sound_id: str


@dataclass(frozen=True)
class SpawnParticle:
    effect_id: str
    position: Vec2


@dataclass(frozen=True)
class DestroyEntity:
    entity_id: int


@dataclass(frozen=True)
class TransitionState:
    """Emitted whenever the state machine enters a new state."""
    previous: GameState
    current: GameState


@dataclass(frozen=True)
class SetPaddlePosition:
    x: float


@dataclass(frozen=True)
class ShowEndScreen:
    won: bool


@dataclass(frozen=True)
class ShowTapPrompt:
    visible: bool


@dataclass(frozen=True)
class PresentNewSession:
    pass


@dataclass(frozen=True)
class ResetSession:
    """Request from the input router to rebuild the whole session."""
    pass


# Physics-facing commands


@dataclass(frozen=True)
class ApplyImpulse:
    entity_id: int
    impulse: Vec2


@dataclass(frozen=True)
class SetVelocity:
    entity_id: int
    velocity: Vec2


@dataclass(frozen=True)
class SetLinearDamping:
    entity_id: int
    damping: float


Command = Union[
    PlaySound,
    SpawnParticle,
    DestroyEntity,
    TransitionState,
    SetPaddlePosition,
    ShowEndScreen,
    ShowTapPrompt,
    PresentNewSession,
    ResetSession,
    ApplyImpulse,
    SetVelocity,
    SetLinearDamping,
]

PHYSICS_COMMANDS = (ApplyImpulse, SetVelocity, SetLinearDamping)
