"""Tests for the collision rule engine."""

import pytest

from breakout.types import (
    Category,
    DestroyEntity,
    GameState,
    PlaySound,
    SpawnParticle,
)
from breakout.collision import classify
from breakout.rules import is_game_won, resolve_collision
from breakout.world import build_world
from breakout import arena


def _setup(profile_key="enhanced"):
    profile = arena.get_profile(profile_key)
    return build_world(profile), profile


def _event(world, category):
    other = world.first_of(category)
    return classify(other, world.ball)


def test_ball_border_plays_bounce_sound():
    """Ball hitting the border plays the blip."""
    world, profile = _setup()
    res = resolve_collision(GameState.PLAYING, _event(world, Category.BORDER), world, profile)
    assert res.commands == [PlaySound(arena.SOUND_BORDER_BOUNCE)]
    assert res.transition is None


def test_ball_paddle_plays_paddle_sound():
    """Ball hitting the paddle plays the paddle blip."""
    world, profile = _setup()
    res = resolve_collision(GameState.PLAYING, _event(world, Category.PADDLE), world, profile)
    assert res.commands == [PlaySound(arena.SOUND_PADDLE_BOUNCE)]
    assert res.transition is None


def test_basic_profile_is_silent():
    """Basic profile emits no sounds."""
    world, profile = _setup("basic")
    res = resolve_collision(GameState.PLAYING, _event(world, Category.BORDER), world, profile)
    assert res.commands == []


def test_ball_bottom_loses_regardless_of_blocks():
    """Bottom contact ends the game as a loss even with every block left."""
    world, profile = _setup()
    res = resolve_collision(GameState.PLAYING, _event(world, Category.BOTTOM), world, profile)
    assert res.transition == GameState.GAME_OVER
    assert res.won is False
    assert world.block_count() == 16


def test_ball_block_breaks_block():
    """Block contact removes the block and emits sound, particle and destroy."""
    world, profile = _setup()
    block = world.blocks()[0]
    res = resolve_collision(GameState.PLAYING, classify(world.ball, block), world, profile)

    assert world.get(block.id) is None
    assert world.block_count() == 15
    assert res.commands[0] == PlaySound(arena.SOUND_BLOCK_BREAK)
    assert isinstance(res.commands[1], SpawnParticle)
    assert res.commands[1].effect_id == arena.PARTICLE_BLOCK_BREAK
    assert res.commands[1].position == block.position
    assert res.commands[2] == DestroyEntity(block.id)
    assert res.transition is None


def test_duplicate_block_contact_is_noop():
    """A second contact for the same block produces nothing."""
    world, profile = _setup()
    block = world.blocks()[0]
    event = classify(block, world.ball)
    first = resolve_collision(GameState.PLAYING, event, world, profile)
    second = resolve_collision(GameState.PLAYING, event, world, profile)

    assert len([c for c in first.commands if isinstance(c, DestroyEntity)]) == 1
    assert second.commands == []
    assert second.transition is None
    assert world.block_count() == 15


def test_last_block_wins():
    """Breaking the final block ends the game as a win in the same resolution."""
    world, profile = _setup("basic")
    blocks = world.blocks()
    for block in blocks[:-1]:
        res = resolve_collision(GameState.PLAYING, classify(world.ball, block), world, profile)
        assert res.transition is None

    res = resolve_collision(GameState.PLAYING, classify(world.ball, blocks[-1]), world, profile)
    assert res.transition == GameState.GAME_OVER
    assert res.won is True
    assert is_game_won(world)


@pytest.mark.parametrize("state", [GameState.WAITING_FOR_TAP, GameState.GAME_OVER])
def test_collisions_ignored_outside_playing(state):
    """No rule fires unless the game is Playing."""
    world, profile = _setup()
    block = world.blocks()[0]
    for event in (
        classify(world.ball, block),
        _event(world, Category.BOTTOM),
        _event(world, Category.BORDER),
    ):
        res = resolve_collision(state, event, world, profile)
        assert res.commands == []
        assert res.transition is None
    assert world.get(block.id) is block


def test_pairs_without_rule_are_noop():
    """Block/Block and Paddle/Border contacts have no effect."""
    world, profile = _setup()
    b1, b2 = world.blocks()[:2]
    res = resolve_collision(GameState.PLAYING, classify(b1, b2), world, profile)
    assert res.commands == [] and res.transition is None

    paddle = world.paddle
    border = world.first_of(Category.BORDER)
    res = resolve_collision(GameState.PLAYING, classify(border, paddle), world, profile)
    assert res.commands == [] and res.transition is None
    assert world.block_count() == 16


def test_block_commands_are_hashable():
    """Commands carrying vectors can be collected in sets and dict keys."""
    world, profile = _setup()
    block = world.blocks()[0]
    resolution = resolve_collision(GameState.PLAYING, classify(block, world.ball), world, profile)
    commands = set(resolution.commands)
    assert SpawnParticle(arena.PARTICLE_BLOCK_BREAK, block.position) in commands
    assert DestroyEntity(block.id) in commands
