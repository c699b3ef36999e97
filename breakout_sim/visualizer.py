"""Pygame visualizer — window, mouse input and presentation sink for a session."""

import logging
from collections import deque
from typing import Optional

try:
    import pygame
except ImportError:
    pygame = None

from breakout.types import Category, GameState, PointerDown, PointerMove, PointerUp, Vec2
from breakout.game import GameSession
from breakout import arena

logger = logging.getLogger(__name__)

# Window
WIN_W = 600
WIN_H = 860
HEADER_H = 40

# Colors
BG_COLOR = (12, 12, 22)
ARENA_BG = (18, 32, 24)
BORDER_COLOR = (90, 140, 90)
BOTTOM_RED = (233, 69, 96)
PADDLE_COLOR = (222, 196, 120)
BLOCK_GREEN = (78, 170, 96)
BLOCK_EDGE = (30, 70, 40)
BALL_WHITE = (245, 245, 245)
TRAIL_BLUE = (150, 190, 235)
PARTICLE_COLOR = (200, 220, 140)
ACCENT = (233, 69, 96)
CARD_BG = (26, 26, 46)
TEXT_WHITE = (224, 224, 224)
TEXT_DIM = (136, 136, 136)
WIN_YELLOW = (255, 217, 61)

PARTICLE_LIFETIME = 1.0
TRAIL_LENGTH = 24


def _layout() -> tuple[float, int, int]:
    """Scale and offset that letterbox the arena below the header."""
    avail_h = WIN_H - HEADER_H
    scale = min(WIN_W / arena.ARENA_WIDTH, avail_h / arena.ARENA_HEIGHT)
    ox = int((WIN_W - arena.ARENA_WIDTH * scale) / 2)
    oy = HEADER_H + int((avail_h - arena.ARENA_HEIGHT * scale) / 2)
    return scale, ox, oy


def _arena_to_screen(pos: Vec2, scale: float, ox: int, oy: int) -> tuple[int, int]:
    return int(ox + pos.x * scale), int(oy + (arena.ARENA_HEIGHT - pos.y) * scale)


def _screen_to_arena(px: float, py: float, scale: float, ox: int, oy: int) -> Vec2:
    return Vec2((px - ox) / scale, arena.ARENA_HEIGHT - (py - oy) / scale)


class PygameSink:
    """Presentation sink that keeps the visual state drawn each frame.

    Audio assets are out of scope, so sounds show up in a HUD ticker.
    """

    def __init__(self):
        self.particles: list = []  # [effect_id, position, remaining seconds]
        self.sounds: deque = deque(maxlen=5)
        self.end_screen: Optional[bool] = None
        self.tap_prompt = False
        self.trail_enabled = False
        self.state = GameState.WAITING_FOR_TAP
        self.paddle_x: Optional[float] = None

    def play_sound(self, sound_id: str) -> None:
        self.sounds.appendleft(sound_id)

    def spawn_particle(self, effect_id: str, point: Vec2) -> None:
        if effect_id == arena.PARTICLE_BALL_TRAIL:
            self.trail_enabled = True
            return
        self.particles.append([effect_id, point.copy(), PARTICLE_LIFETIME])

    def remove_entity(self, entity_id: int) -> None:
        logger.debug("entity %s removed", entity_id)

    def set_paddle_position(self, x: float) -> None:
        self.paddle_x = x

    def transition_state(self, previous: GameState, current: GameState) -> None:
        self.state = current

    def show_end_screen(self, won: bool) -> None:
        self.end_screen = won

    def show_tap_prompt(self, visible: bool) -> None:
        self.tap_prompt = visible

    def present_new_session(self) -> None:
        self.particles.clear()
        self.sounds.clear()
        self.end_screen = None
        self.trail_enabled = False
        self.state = GameState.WAITING_FOR_TAP
        self.paddle_x = None

    def update(self, dt: float) -> None:
        for p in self.particles:
            p[2] -= dt
        self.particles = [p for p in self.particles if p[2] > 0]


def _translate_mouse(event, layout) -> list:
    """Map one pygame mouse event to pointer events in arena coordinates."""
    scale, ox, oy = layout
    if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
        return [PointerDown(_screen_to_arena(*event.pos, scale, ox, oy))]
    if event.type == pygame.MOUSEBUTTONUP and event.button == 1:
        return [PointerUp(_screen_to_arena(*event.pos, scale, ox, oy))]
    if event.type == pygame.MOUSEMOTION and event.buttons[0]:
        px, py = event.pos
        rx, ry = event.rel
        start = _screen_to_arena(px - rx, py - ry, scale, ox, oy)
        end = _screen_to_arena(px, py, scale, ox, oy)
        return [PointerMove(start, end)]
    return []


class PygameInput:
    """Input source reading the pygame event queue once per frame."""

    def __init__(self, layout):
        self.layout = layout
        self.quit_requested = False

    def poll(self) -> list:
        pointer_events = []
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.quit_requested = True
            elif event.type == pygame.KEYDOWN and event.key in (pygame.K_q, pygame.K_ESCAPE):
                self.quit_requested = True
            else:
                pointer_events.extend(_translate_mouse(event, self.layout))
        return pointer_events


def _draw_arena(surface, session: GameSession, sink: PygameSink, trail, layout, fonts):
    scale, ox, oy = layout
    font_sm, font_md, font_xl = fonts

    def to_screen(p):
        return _arena_to_screen(p, scale, ox, oy)

    aw = int(arena.ARENA_WIDTH * scale)
    ah = int(arena.ARENA_HEIGHT * scale)
    pygame.draw.rect(surface, ARENA_BG, (ox, oy, aw, ah))
    pygame.draw.rect(surface, BORDER_COLOR, (ox, oy, aw, ah), 2)
    pygame.draw.line(surface, BOTTOM_RED, (ox, oy + ah - 1), (ox + aw, oy + ah - 1), 3)

    for entity in session.world.entities():
        if entity.category == Category.BLOCK or entity.category == Category.PADDLE:
            x, y = to_screen(Vec2(
                entity.position.x - entity.half_width,
                entity.position.y + entity.half_height,
            ))
            rect = (x, y, int(entity.size.x * scale), int(entity.size.y * scale))
            color = BLOCK_GREEN if entity.category == Category.BLOCK else PADDLE_COLOR
            pygame.draw.rect(surface, color, rect, border_radius=4)
            if entity.category == Category.BLOCK:
                pygame.draw.rect(surface, BLOCK_EDGE, rect, 2, border_radius=4)

    ball = session.world.ball
    if ball is not None:
        if sink.trail_enabled and len(trail) > 1:
            pygame.draw.lines(surface, TRAIL_BLUE, False, [to_screen(p) for p in trail], 2)
        pygame.draw.circle(surface, BALL_WHITE, to_screen(ball.position), max(2, int(ball.half_width * scale)))

    for effect_id, pos, remaining in sink.particles:
        cx, cy = to_screen(pos)
        spread = int((PARTICLE_LIFETIME - remaining) * 40) + 4
        for dx, dy in ((-1, -1), (1, -1), (-1, 1), (1, 1), (0, -1), (0, 1)):
            pygame.draw.circle(surface, PARTICLE_COLOR, (cx + dx * spread, cy + dy * spread), 3)

    center = (ox + aw // 2, oy + ah // 2)
    if sink.tap_prompt:
        txt = font_md.render("TAP TO PLAY", True, TEXT_WHITE)
        surface.blit(txt, (center[0] - txt.get_width() // 2, center[1]))
    if sink.end_screen is not None:
        label = "YOU WON" if sink.end_screen else "GAME OVER"
        color = WIN_YELLOW if sink.end_screen else ACCENT
        txt = font_xl.render(label, True, color)
        surface.blit(txt, (center[0] - txt.get_width() // 2, center[1] - txt.get_height()))
        hint = font_sm.render("click to play again", True, TEXT_DIM)
        surface.blit(hint, (center[0] - hint.get_width() // 2, center[1] + 8))


def _draw_header(surface, session: GameSession, sink: PygameSink, fonts):
    font_sm, font_md, _ = fonts
    pygame.draw.rect(surface, CARD_BG, (0, 0, WIN_W, HEADER_H))
    pygame.draw.line(surface, ACCENT, (0, HEADER_H - 1), (WIN_W, HEADER_H - 1), 2)
    surface.blit(font_md.render("BREAKOUT", True, TEXT_WHITE), (12, 11))
    status = f"{session.state.value}  blocks:{session.world.block_count()}  [{session.profile_key}]"
    surface.blit(font_sm.render(status, True, TEXT_DIM), (120, 14))
    if sink.sounds:
        txt = font_sm.render("♪ " + sink.sounds[0], True, TEXT_DIM)
        surface.blit(txt, (WIN_W - txt.get_width() - 10, 14))


def run_visualizer(profile_key: str = arena.DEFAULT_PROFILE):
    """Open a window and play a session with the mouse."""
    if pygame is None:
        print("ERROR: pygame is not installed. Run: pip install pygame")
        return

    pygame.init()
    screen = pygame.display.set_mode((WIN_W, WIN_H))
    pygame.display.set_caption("Breakout")
    clock = pygame.time.Clock()

    fonts = (
        pygame.font.SysFont("monospace", 13),
        pygame.font.SysFont("monospace", 18, bold=True),
        pygame.font.SysFont("monospace", 42, bold=True),
    )
    layout = _layout()

    sink = PygameSink()
    session = GameSession(profile_key, sink=sink)
    trail: deque = deque(maxlen=TRAIL_LENGTH)
    sessions_seen = session.sessions_started

    source = PygameInput(layout)

    while not source.quit_requested:
        dt = clock.tick(60) / 1000.0
        session.step(dt, source.poll())
        sink.update(dt)

        if session.sessions_started != sessions_seen:
            sessions_seen = session.sessions_started
            trail.clear()
        ball = session.world.ball
        if ball is not None and session.state == GameState.PLAYING:
            trail.append(ball.position.copy())

        screen.fill(BG_COLOR)
        _draw_header(screen, session, sink, fonts)
        _draw_arena(screen, session, sink, trail, layout, fonts)
        pygame.display.flip()

    pygame.quit()
