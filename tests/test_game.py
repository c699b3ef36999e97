"""Tests for the game session (frame driver) and headless simulation."""

import random

import pytest

from breakout.types import (
    Category,
    ContactEvent,
    DestroyEntity,
    GameState,
    PointerDown,
    PointerMove,
    PointerUp,
    PresentNewSession,
    ShowEndScreen,
    TransitionState,
    Vec2,
)
from breakout.autopilot import Autopilot
from breakout.game import (
    GameSession,
    SessionResult,
    _compute_session_stats,
    simulate_many,
    simulate_session,
)
from breakout.physics import ArcadePhysics


class RecordingSink:
    """Presentation sink that records every call."""

    def __init__(self):
        self.calls = []

    def play_sound(self, sound_id):
        self.calls.append(("play_sound", sound_id))

    def spawn_particle(self, effect_id, point):
        self.calls.append(("spawn_particle", effect_id))

    def remove_entity(self, entity_id):
        self.calls.append(("remove_entity", entity_id))

    def set_paddle_position(self, x):
        self.calls.append(("set_paddle_position", x))

    def transition_state(self, previous, current):
        self.calls.append(("transition_state", current))

    def show_end_screen(self, won):
        self.calls.append(("show_end_screen", won))

    def show_tap_prompt(self, visible):
        self.calls.append(("show_tap_prompt", visible))

    def present_new_session(self):
        self.calls.append(("present_new_session",))

    def names(self):
        return [c[0] for c in self.calls]


class BrokenSink(RecordingSink):
    """Sink whose audio always fails."""

    def play_sound(self, sound_id):
        raise RuntimeError("audio device lost")


class ScriptedPhysics(ArcadePhysics):
    """Reference physics whose next tick reports scripted contacts instead."""

    def __init__(self, world):
        super().__init__(world)
        self.script = []

    def tick(self, dt):
        contacts, self.script = self.script, []
        return contacts


def _session(profile_key="enhanced", **kwargs):
    return GameSession(profile_key, rng=random.Random(3), **kwargs)


def _tap(session):
    return session.handle_pointer(PointerDown(Vec2(100, 500)))


def _hit(session, entity):
    return ContactEvent(entity.id, session.world.ball.id, entity.position.copy())


def _hit_category(session, category):
    return _hit(session, session.world.first_of(category))


def test_session_starts_waiting():
    """A new session waits for a tap with a full set of blocks."""
    session = _session()
    assert session.state == GameState.WAITING_FOR_TAP
    assert session.outcome is None
    assert session.world.block_count() == 16


def test_tap_starts_playing():
    """A press inside the arena while waiting starts the game."""
    session = _session()
    commands = _tap(session)
    assert session.state == GameState.PLAYING
    assert TransitionState(GameState.WAITING_FOR_TAP, GameState.PLAYING) in commands


def test_ball_moves_after_tap():
    """The launch impulse reaches the physics world."""
    session = _session()
    _tap(session)
    vel = session.physics.velocity(session.world.ball.id)
    assert abs(vel.x) > 0 and abs(vel.y) > 0


def test_destroying_all_8_blocks_wins():
    """Basic profile: hitting each of the 8 blocks once wins the game."""
    session = _session("basic")
    _tap(session)
    blocks = session.world.blocks()
    assert len(blocks) == 8

    for i, block in enumerate(blocks):
        assert session.state == GameState.PLAYING
        session.resolve_contacts([_hit(session, block)])
        assert session.world.block_count() == 7 - i

    assert session.state == GameState.GAME_OVER
    assert session.outcome is True


def test_win_in_same_tick_stops_further_rules():
    """Contacts after the winning one in the same tick have no effect."""
    session = _session("basic")
    _tap(session)
    blocks = session.world.blocks()
    for block in blocks[:-1]:
        session.resolve_contacts([_hit(session, block)])

    last = blocks[-1]
    commands = session.resolve_contacts([
        _hit(session, last),
        _hit(session, last),
        _hit_category(session, Category.BOTTOM),
    ])
    assert session.outcome is True
    assert sum(isinstance(c, DestroyEntity) for c in commands) == 1
    assert commands[-1] == ShowEndScreen(True)


def test_bottom_loses_with_blocks_left():
    """Ball reaching the bottom loses regardless of remaining blocks."""
    session = _session()
    _tap(session)
    session.resolve_contacts([_hit_category(session, Category.BOTTOM)])
    assert session.state == GameState.GAME_OVER
    assert session.outcome is False
    assert session.world.block_count() == 16


def test_duplicate_block_contacts_destroy_once():
    """The same block reported twice in one tick is destroyed once."""
    session = _session()
    _tap(session)
    block = session.world.blocks()[0]
    commands = session.resolve_contacts([_hit(session, block), _hit(session, block)])
    assert [c for c in commands if isinstance(c, DestroyEntity)] == [DestroyEntity(block.id)]
    assert session.world.block_count() == 15


def test_contacts_ignored_while_waiting():
    """Residual contacts before the tap never break blocks or end the game."""
    session = _session()
    block = session.world.blocks()[0]
    commands = session.resolve_contacts([
        _hit(session, block),
        _hit_category(session, Category.BOTTOM),
    ])
    assert commands == []
    assert session.state == GameState.WAITING_FOR_TAP
    assert session.world.block_count() == 16


def test_tap_after_game_over_resets_session():
    """A press on the end screen rebuilds everything and waits again."""
    session = _session()
    _tap(session)
    for block in session.world.blocks()[:5]:
        session.resolve_contacts([_hit(session, block)])
    session.resolve_contacts([_hit_category(session, Category.BOTTOM)])
    old_world = session.world

    commands = _tap(session)

    assert PresentNewSession() in commands
    assert session.state == GameState.WAITING_FOR_TAP
    assert session.outcome is None
    assert session.world is not old_world
    assert session.router.world is session.world
    assert session.machine.world is session.world
    assert session.world.block_count() == 16
    assert session.sessions_started == 2


def test_reset_restores_basic_block_count():
    """Reset restores the profile's initial configuration."""
    session = _session("basic")
    _tap(session)
    session.resolve_contacts([_hit(session, session.world.blocks()[0])])
    session.resolve_contacts([_hit_category(session, Category.BOTTOM)])
    _tap(session)
    assert session.world.block_count() == 8


def test_frame_driver_resolves_physics_contacts_in_order():
    """Contacts from one physics tick are resolved in arrival order."""
    session = _session("basic", physics_factory=ScriptedPhysics)
    _tap(session)
    for block in session.world.blocks()[:-1]:
        session.world.remove(block.id)
    last = session.world.blocks()[0]

    session.physics.script = [
        _hit(session, last),
        _hit_category(session, Category.BOTTOM),
    ]
    session.tick(1 / 60)
    assert session.state == GameState.GAME_OVER
    assert session.outcome is True


def test_drag_moves_paddle_and_notifies_sink():
    """Dragging the paddle updates the world and the presentation."""
    sink = RecordingSink()
    session = _session(sink=sink)
    paddle = session.world.paddle
    x0 = paddle.position.x

    session.step(1 / 60, [
        PointerDown(paddle.position.copy()),
        PointerMove(Vec2(x0, 100), Vec2(x0 - 30, 100)),
        PointerUp(),
    ])
    assert paddle.position.x == pytest.approx(x0 - 30)
    assert ("set_paddle_position", pytest.approx(x0 - 30)) in sink.calls


def test_sink_receives_commands_in_order():
    """Sink sees the tap prompt, the transition and the end screen."""
    sink = RecordingSink()
    session = _session(sink=sink)
    assert ("show_tap_prompt", True) in sink.calls

    _tap(session)
    session.resolve_contacts([_hit_category(session, Category.BOTTOM)])
    names = sink.names()
    assert names.index("transition_state") < names.index("show_end_screen")
    assert ("show_end_screen", False) in sink.calls
    assert ("play_sound", "game-over") in sink.calls


def test_failing_sink_does_not_break_game():
    """Presentation failures are logged and game state stays correct."""
    sink = BrokenSink()
    session = _session(sink=sink)
    _tap(session)
    block = session.world.blocks()[0]
    session.resolve_contacts([_hit(session, block)])

    assert session.world.block_count() == 15
    assert ("remove_entity", block.id) in sink.calls

    session.resolve_contacts([_hit_category(session, Category.BOTTOM)])
    assert session.state == GameState.GAME_OVER
    assert ("show_end_screen", False) in sink.calls


def test_contact_counts_recorded():
    """Resolved contacts are tallied per canonical pair."""
    session = _session()
    _tap(session)
    session.resolve_contacts([_hit_category(session, Category.BORDER)] * 3)
    assert session.contact_counts[(Category.BALL, Category.BORDER)] == 3


def test_step_runs_physics_before_input():
    """A bottom contact in the same frame as a tap on GameOver is resolved first."""
    session = _session(physics_factory=ScriptedPhysics)
    _tap(session)
    session.physics.script = [_hit_category(session, Category.BOTTOM)]
    session.step(1 / 60, [PointerDown(Vec2(200, 200))])
    # Physics ended the game, then the press started a new session
    assert session.sessions_started == 2
    assert session.state == GameState.WAITING_FOR_TAP


def test_perfect_pilot_never_loses():
    """A pilot with no lag keeps the ball in play."""
    pilot = Autopilot("Perfect", "perfect", rng=random.Random(1))
    result = simulate_session(pilot, "enhanced", max_time=30.0, rng=random.Random(5))
    assert isinstance(result, SessionResult)
    assert result.won is not False
    assert result.paddle_hits > 0
    assert result.blocks_destroyed > 0


def test_simulate_many_and_stats():
    """Aggregate stats cover every session."""
    pilot = Autopilot("Sloppy", "sloppy", rng=random.Random(2))
    results = simulate_many(pilot, "basic", sessions=3, seed=11, max_time=20.0)
    assert len(results) == 3
    for r in results:
        assert r.won in (True, False, None)
        assert r.timed_out == (r.won is None)
        assert 0 <= r.blocks_destroyed <= 8

    stats = _compute_session_stats(results)
    assert stats["sessions"] == 3
    assert stats["wins"] + stats["losses"] + stats["timeouts"] == 3
    assert 0.0 <= stats["win_rate"] <= 1.0
    for key in ("avg_duration", "avg_blocks_destroyed", "avg_paddle_hits"):
        assert key in stats
