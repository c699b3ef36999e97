"""Game session — the frame driver tying physics, rules, states and input.

One ``step`` is strictly sequential:
1. advance physics and resolve every contact, in arrival order, through the
   classifier and the rule engine (transitions applied immediately, so a
   contact that follows a game-ending one sees GameOver);
2. run the active state's per-frame hook;
3. route this frame's pointer events;
4. flush the queued commands to the presentation sink.

Physics commands are applied as soon as they are emitted. Presentation
commands are queued and flushed at the end of the step; a failing sink is
logged and never affects game state.
"""

import logging
import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from breakout.types import (
    PHYSICS_COMMANDS,
    ApplyImpulse,
    Category,
    ContactEvent,
    DestroyEntity,
    GameState,
    PlaySound,
    PointerEvent,
    PresentNewSession,
    ResetSession,
    SetLinearDamping,
    SetPaddlePosition,
    SetVelocity,
    ShowEndScreen,
    ShowTapPrompt,
    SpawnParticle,
    TransitionState,
)
from breakout.collision import classify
from breakout.input import InputRouter
from breakout.physics import ArcadePhysics
from breakout.rules import resolve_collision
from breakout.states import StateMachine
from breakout.world import World, build_world
from breakout import arena

logger = logging.getLogger(__name__)


class GameSession:
    """Owns the current world and state machine and drives them frame by frame.

    Args:
        profile_key: Configuration profile name (see ``arena.PROFILES``).
        sink: Presentation sink receiving flushed commands, or None.
        physics_factory: Builds a physics world for a freshly built world.
        rng: Random source for ball launch directions.
    """

    def __init__(
        self,
        profile_key: str = arena.DEFAULT_PROFILE,
        sink=None,
        physics_factory: Callable[[World], object] = ArcadePhysics,
        rng: Optional[random.Random] = None,
    ):
        self.profile_key = profile_key
        self.profile = arena.get_profile(profile_key)
        self.sink = sink
        self._physics_factory = physics_factory
        self._rng = rng if rng is not None else random.Random()
        self._pending: list = []
        self.sessions_started = 0
        self.contact_counts: Counter = Counter()
        self._build()

    # --- Session lifecycle ---

    def _build(self) -> None:
        """Build a complete fresh session, then swap it in at once."""
        world = build_world(self.profile)
        machine = StateMachine(world, self.profile, rng=self._rng)
        router = InputRouter(world, machine)
        physics = self._physics_factory(world)

        self.world = world
        self.machine = machine
        self.router = router
        self.physics = physics
        self.contact_counts = Counter()
        self.sessions_started += 1

        logger.info(
            "session %d started (%s, %d blocks)",
            self.sessions_started, self.profile_key, world.block_count(),
        )
        commands = machine.start()
        ball = world.ball
        if self.profile["trail"] and ball is not None:
            commands.append(SpawnParticle(arena.PARTICLE_BALL_TRAIL, ball.position.copy()))
        self._dispatch(commands)

    def reset(self) -> list:
        """Discard the world and state and start over in WaitingForTap."""
        self._pending.append(PresentNewSession())
        self._build()
        return self.flush()

    @property
    def state(self) -> GameState:
        return self.machine.state

    @property
    def outcome(self) -> Optional[bool]:
        """True if won, False if lost, None while the session is undecided."""
        return self.machine.outcome

    # --- Frame driving ---

    def step(self, dt: float, events: Iterable[PointerEvent] = ()) -> list:
        """Run one frame: physics and rules, state hook, then input."""
        self._advance(dt)
        for event in events:
            self._route(event)
        return self.flush()

    def tick(self, dt: float) -> list:
        """Run one frame without input."""
        self._advance(dt)
        return self.flush()

    def handle_pointer(self, event: PointerEvent) -> list:
        self._route(event)
        return self.flush()

    def resolve_contacts(self, contacts: Iterable[ContactEvent]) -> list:
        """Feed externally produced contacts through the rule engine."""
        for contact in contacts:
            self._resolve_contact(contact)
        return self.flush()

    def _advance(self, dt: float) -> None:
        for contact in self.physics.tick(dt):
            self._resolve_contact(contact)
        self._dispatch(self.machine.update(dt, self.physics))

    def _resolve_contact(self, contact: ContactEvent) -> None:
        if not self.machine.handles_collisions:
            return

        a = self.world.get(contact.body_a)
        b = self.world.get(contact.body_b)
        if a is None or b is None:
            logger.debug("skipping contact with removed body %s/%s", contact.body_a, contact.body_b)
            return

        event = classify(a, b, contact.point)
        self.contact_counts[event.pair] += 1

        resolution = resolve_collision(self.machine.state, event, self.world, self.profile)
        self._dispatch(resolution.commands)
        if resolution.transition is not None:
            self._dispatch(self.machine.enter(resolution.transition, won=resolution.won))

    def _route(self, event: PointerEvent) -> None:
        self._dispatch(self.router.handle(event))

    # --- Command handling ---

    def _dispatch(self, commands: list) -> None:
        for command in commands:
            if isinstance(command, ResetSession):
                self._pending.append(PresentNewSession())
                self._build()
                continue
            if isinstance(command, PHYSICS_COMMANDS):
                self._apply_physics(command)
            elif isinstance(command, SetPaddlePosition):
                paddle = self.world.paddle
                if paddle is not None:
                    self.physics.set_position(paddle.id, paddle.position)
            self._pending.append(command)

    def _apply_physics(self, command) -> None:
        if isinstance(command, ApplyImpulse):
            self.physics.apply_impulse(command.entity_id, command.impulse)
        elif isinstance(command, SetVelocity):
            self.physics.set_velocity(command.entity_id, command.velocity)
        elif isinstance(command, SetLinearDamping):
            self.physics.set_linear_damping(command.entity_id, command.damping)

    def flush(self) -> list:
        """Hand queued commands to the sink and return them."""
        commands, self._pending = self._pending, []
        if self.sink is not None:
            for command in commands:
                try:
                    _deliver(self.sink, command)
                except Exception:
                    logger.warning("presentation sink failed on %r", command, exc_info=True)
        return commands


def _deliver(sink, command) -> None:
    """Call the sink method matching ``command``."""
    if isinstance(command, PlaySound):
        sink.play_sound(command.sound_id)
    elif isinstance(command, SpawnParticle):
        sink.spawn_particle(command.effect_id, command.position)
    elif isinstance(command, DestroyEntity):
        sink.remove_entity(command.entity_id)
    elif isinstance(command, TransitionState):
        sink.transition_state(command.previous, command.current)
    elif isinstance(command, SetPaddlePosition):
        sink.set_paddle_position(command.x)
    elif isinstance(command, ShowEndScreen):
        sink.show_end_screen(command.won)
    elif isinstance(command, ShowTapPrompt):
        sink.show_tap_prompt(command.visible)
    elif isinstance(command, PresentNewSession):
        sink.present_new_session()


# --- Headless sessions ---


@dataclass
class SessionResult:
    """Outcome of one headless session."""
    profile: str
    pilot: str
    won: Optional[bool]   # None if the session timed out
    duration: float
    blocks_destroyed: int
    paddle_hits: int
    border_hits: int
    timed_out: bool
    commands: Counter = field(default_factory=Counter)


def simulate_session(
    pilot,
    profile_key: str = arena.DEFAULT_PROFILE,
    dt: float = 1.0 / 60.0,
    max_time: float = 300.0,
    rng: Optional[random.Random] = None,
) -> SessionResult:
    """Play one session to GameOver (or ``max_time``) with an autopilot."""
    session = GameSession(profile_key, rng=rng)
    initial_blocks = session.world.block_count()
    pilot.reset()

    tally: Counter = Counter()
    paddle_hits = 0
    border_hits = 0
    t = 0.0

    while session.state != GameState.GAME_OVER and t < max_time:
        events = pilot.events(session.world, session.state, dt)
        for command in session.step(dt, events):
            tally[type(command).__name__] += 1
        paddle_hits += session.contact_counts.pop((Category.BALL, Category.PADDLE), 0)
        border_hits += session.contact_counts.pop((Category.BALL, Category.BORDER), 0)
        t += dt

    timed_out = session.state != GameState.GAME_OVER
    return SessionResult(
        profile=profile_key,
        pilot=pilot.name,
        won=None if timed_out else session.outcome,
        duration=round(t, 3),
        blocks_destroyed=initial_blocks - session.world.block_count(),
        paddle_hits=paddle_hits,
        border_hits=border_hits,
        timed_out=timed_out,
        commands=tally,
    )


def simulate_many(
    pilot,
    profile_key: str = arena.DEFAULT_PROFILE,
    sessions: int = 20,
    seed: Optional[int] = None,
    **kwargs,
) -> list[SessionResult]:
    """Run several sessions with one pilot and profile."""
    rng = random.Random(seed)
    return [
        simulate_session(pilot, profile_key, rng=rng, **kwargs)
        for _ in range(sessions)
    ]


def _compute_session_stats(results: list[SessionResult]) -> dict:
    """Aggregate statistics over many sessions."""
    n = len(results)
    wins = sum(1 for r in results if r.won is True)
    losses = sum(1 for r in results if r.won is False)
    timeouts = sum(1 for r in results if r.timed_out)

    durations = [r.duration for r in results]
    avg_duration = sum(durations) / max(n, 1)

    return {
        "sessions": n,
        "wins": wins,
        "losses": losses,
        "timeouts": timeouts,
        "win_rate": round(wins / max(n, 1), 3),
        "avg_duration": round(avg_duration, 2),
        "max_duration": max(durations) if durations else 0.0,
        "avg_blocks_destroyed": round(sum(r.blocks_destroyed for r in results) / max(n, 1), 2),
        "avg_paddle_hits": round(sum(r.paddle_hits for r in results) / max(n, 1), 2),
        "avg_border_hits": round(sum(r.border_hits for r in results) / max(n, 1), 2),
    }
