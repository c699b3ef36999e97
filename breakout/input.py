"""Input router — turns pointer events into paddle drags or taps.

What a pointer does depends on the state:
- WaitingForTap: a press starts the game and also starts a drag
- Playing: a press on the paddle starts a drag; moves slide the paddle
- GameOver: a press asks for a brand new session
"""

import logging

from breakout.types import (
    Category,
    GameState,
    PointerDown,
    PointerEvent,
    PointerMove,
    PointerUp,
    ResetSession,
    SetPaddlePosition,
    Vec2,
)
from breakout.states import StateMachine
from breakout.world import World
from breakout import arena

logger = logging.getLogger(__name__)


class InputRouter:
    """Routes pointer events for one session."""

    def __init__(self, world: World, machine: StateMachine):
        self.world = world
        self.machine = machine
        self.drag_eligible = False

    def handle(self, event: PointerEvent) -> list:
        if isinstance(event, PointerDown):
            return self.pointer_down(event.pos)
        if isinstance(event, PointerMove):
            return self.pointer_move(event.start, event.end)
        if isinstance(event, PointerUp):
            return self.pointer_up()
        logger.debug("ignoring unknown pointer event %r", event)
        return []

    def pointer_down(self, pos: Vec2) -> list:
        if not pos.is_finite():
            logger.debug("dropping non-finite pointer down %r", pos)
            return []
        pos = self.world.clamp_point(pos)

        if self.machine.handles_taps:
            if self.machine.state == GameState.GAME_OVER:
                return [ResetSession()]
            commands = self.machine.enter(GameState.PLAYING)
            self.drag_eligible = True
            return commands

        if self.machine.accepts_drags:
            body = self.world.body_at(pos)
            if body is not None and body.category == Category.PADDLE:
                self.drag_eligible = True
        return []

    def pointer_move(self, start: Vec2, end: Vec2) -> list:
        if not self.drag_eligible or not self.machine.accepts_drags:
            return []
        if not (start.is_finite() and end.is_finite()):
            logger.debug("dropping non-finite pointer move %r -> %r", start, end)
            return []

        paddle = self.world.paddle
        if paddle is None:
            return []

        start = self.world.clamp_point(start)
        end = self.world.clamp_point(end)
        x = arena.clamp_paddle_x(
            paddle.position.x + (end.x - start.x), paddle.size.x, self.world.width
        )
        paddle.position = Vec2(x, paddle.position.y)
        return [SetPaddlePosition(x)]

    def pointer_up(self) -> list:
        self.drag_eligible = False
        return []
