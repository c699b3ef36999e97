"""Protocols for the collaborators the core drives but does not implement.

The physics backend, the presentation layer and the pointer source can be
swapped (headless reference physics, pygame window, scripted autopilot)
without touching game logic.
"""

from typing import Iterable, Protocol

from breakout.types import ContactEvent, GameState, PointerEvent, Vec2


class PhysicsWorld(Protocol):
    """Physics simulation over the bodies of a world."""

    def tick(self, dt: float) -> list[ContactEvent]:
        """Advance the simulation by ``dt`` seconds.

        Returns the contacts that began during this tick, in the order
        they occurred.
        """
        ...

    def apply_impulse(self, entity_id: int, impulse: Vec2) -> None:
        ...

    def set_position(self, entity_id: int, point: Vec2) -> None:
        ...

    def velocity(self, entity_id: int) -> Vec2:
        ...

    def set_velocity(self, entity_id: int, velocity: Vec2) -> None:
        ...

    def set_linear_damping(self, entity_id: int, damping: float) -> None:
        ...


class PresentationSink(Protocol):
    """Executes presentation commands (audio, particles, screens)."""

    def play_sound(self, sound_id: str) -> None:
        ...

    def spawn_particle(self, effect_id: str, point: Vec2) -> None:
        ...

    def remove_entity(self, entity_id: int) -> None:
        ...

    def set_paddle_position(self, x: float) -> None:
        ...

    def transition_state(self, previous: GameState, current: GameState) -> None:
        ...

    def show_end_screen(self, won: bool) -> None:
        ...

    def show_tap_prompt(self, visible: bool) -> None:
        ...

    def present_new_session(self) -> None:
        ...


class InputSource(Protocol):
    """Produces the pointer events for one frame, in arena coordinates."""

    def poll(self) -> Iterable[PointerEvent]:
        ...
