import logging

import pygame

import utils
import word_loader
from firebase_store import ResultReporter
from . import resources
from . import state as st
from .controller import MENU, RoundController
from .helpers import (
    BG_COLOR,
    DIM_TEXT,
    FIELD_TOP,
    HIT_WORD_COLOR,
    LANE_COLOR,
    PLAYER_Y,
    SCREEN_H,
    SCREEN_W,
    TEXT_COLOR,
    WORD_COLOR,
    format_seconds,
    lane_x,
    word_screen_y,
)

log = logging.getLogger(__name__)

QUIT = "quit"
TITLE = "WORD OBSTACLE GAME"

WORD_CIRCLE = (90, 80, 110)
HIT_WORD_CIRCLE = (60, 55, 75)


def visible_words(state):
    """Words to draw; hidden while paused or counting down."""
    if state.is_paused:
        return ()
    return state.falling_words


def word_colors(word):
    # caught words stay dimmed until their removal fires
    if word.hit:
        return HIT_WORD_CIRCLE, HIT_WORD_COLOR
    return WORD_CIRCLE, WORD_COLOR


class WordObstacleGame:
    def __init__(self, level=None, screen=None, settings=None, reporter=None, navigate=None):
        if level is None or isinstance(level, str):
            key = level or getattr(settings, "level", "expert")
            level = word_loader.get_level(key)
        self.level = level
        self.screen = screen  # optional external pygame surface
        self.settings = settings
        self.reporter = reporter
        self.navigate = navigate
        self.config = st.RoundConfig.from_settings(settings, level=level.key)
        self.audio = resources.AudioPlayer.from_settings(settings)
        self.background = None
        self.controller = None
        self.asset_folder = None
        self.fonts = {}

    def load_sounds(self, folder=None):
        # called by the launcher with the package assets folder
        self.asset_folder = folder
        self.audio.load(folder)

    def build_controller(self):
        if self.reporter is None:
            self.reporter = ResultReporter.from_settings(self.settings)
        self.controller = RoundController(
            self.level.words,
            self.config,
            audio=self.audio,
            reporter=self.reporter,
            navigate=self.navigate,
        )
        return self.controller

    # -- buttons per phase: (label, rect, action, color) --
    def buttons(self, phase):
        c = self.controller
        if phase == st.INSTRUCTIONS:
            return [
                ("Start Game", utils.button_rect(SCREEN_W // 2, 430, w=260, h=54), c.start, (60, 150, 90)),
                ("Back", utils.button_rect(90, 40, w=120, h=40), c.go_home, (90, 90, 120)),
            ]
        if phase == st.PLAYING:
            return [
                ("<", utils.button_rect(SCREEN_W // 2 - 80, SCREEN_H - 36, w=120, h=48), c.move_left, (255, 152, 0)),
                (">", utils.button_rect(SCREEN_W // 2 + 80, SCREEN_H - 36, w=120, h=48), c.move_right, (76, 175, 80)),
                ("Pause", utils.button_rect(SCREEN_W - 60, 24, w=96, h=36), c.pause, (90, 90, 120)),
            ]
        if phase == st.PAUSED:
            return [
                ("Resume", utils.button_rect(SCREEN_W // 2, 300, w=240, h=50), c.resume, (60, 120, 180)),
                ("Home", utils.button_rect(SCREEN_W // 2, 370, w=240, h=50), c.go_home, (200, 90, 70)),
            ]
        if phase == st.OVER:
            return [
                ("Play Again", utils.button_rect(SCREEN_W // 2, 400, w=240, h=50), c.play_again, (60, 150, 90)),
                ("Home", utils.button_rect(SCREEN_W // 2, 470, w=240, h=50), c.go_home, (200, 90, 70)),
            ]
        return []

    def handle_event(self, event):
        """Apply one pygame event. Returns a navigation target when leaving."""
        c = self.controller
        if event.type == pygame.QUIT:
            return QUIT
        phase = c.state.phase
        if event.type == pygame.KEYDOWN:
            key = event.key
            if phase == st.INSTRUCTIONS:
                if key in (pygame.K_RETURN, pygame.K_SPACE):
                    c.start()
                elif key == pygame.K_ESCAPE:
                    return c.go_home()
            elif phase == st.PLAYING:
                if key in (pygame.K_LEFT, pygame.K_a):
                    c.move_left()
                elif key in (pygame.K_RIGHT, pygame.K_d):
                    c.move_right()
                elif key in (pygame.K_p, pygame.K_ESCAPE):
                    c.pause()
            elif phase == st.PAUSED:
                if key in (pygame.K_p, pygame.K_RETURN, pygame.K_SPACE):
                    c.resume()
                elif key in (pygame.K_h, pygame.K_ESCAPE):
                    return c.go_home()
            elif phase == st.OVER:
                if key in (pygame.K_r, pygame.K_RETURN):
                    c.play_again()
                elif key in (pygame.K_h, pygame.K_q, pygame.K_ESCAPE):
                    return c.go_home()
        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            for _label, rect, action, _color in self.buttons(phase):
                if rect.collidepoint(event.pos):
                    if action() == MENU:
                        return MENU
                    break
        return None

    # -- drawing --
    def draw_button(self, screen, label, rect, color):
        pygame.draw.rect(screen, color, rect, border_radius=8)
        text = self.fonts["font"].render(label, True, TEXT_COLOR)
        screen.blit(text, text.get_rect(center=rect.center))

    def draw_centered(self, screen, text, font, y, color=TEXT_COLOR):
        surf = self.fonts[font].render(text, True, color)
        screen.blit(surf, (SCREEN_W // 2 - surf.get_width() // 2, y))

    def draw_field(self, screen):
        s = self.controller.state
        n = self.config.lane_count
        slot = SCREEN_W // n
        for lane in range(n):
            r = pygame.Rect(lane * slot + 6, FIELD_TOP, slot - 12, PLAYER_Y - FIELD_TOP + 40)
            pygame.draw.rect(screen, LANE_COLOR, r, border_radius=10)
        band_top = word_screen_y(self.config.trigger_top)
        band = pygame.Surface((SCREEN_W, word_screen_y(self.config.visible_height) - band_top), pygame.SRCALPHA)
        band.fill((255, 255, 255, 18))
        screen.blit(band, (0, band_top))

        for w in visible_words(s):
            cx = lane_x(w.lane, n)
            cy = word_screen_y(w.y)
            circle, color = word_colors(w)
            pygame.draw.circle(screen, circle, (cx, cy), 30)
            text = self.fonts["font"].render(w.text, True, color)
            screen.blit(text, text.get_rect(center=(cx, cy)))

        for f in s.feedback:
            text = self.fonts["big"].render(f.text, True, f.color)
            screen.blit(text, text.get_rect(center=(lane_x(f.lane, n), word_screen_y(f.y))))

        px = lane_x(s.player_lane, n)
        pygame.draw.circle(screen, (80, 160, 255), (px, PLAYER_Y), 26)
        pygame.draw.circle(screen, TEXT_COLOR, (px, PLAYER_Y), 26, 3)

    def draw_hud(self, screen):
        s = self.controller.state
        f = self.fonts["font"]
        screen.blit(f.render(f"Score: {s.score}", True, TEXT_COLOR), (12, 10))
        timer = f.render(f"Time: {format_seconds(s.time_remaining)}", True, TEXT_COLOR)
        screen.blit(timer, (SCREEN_W // 2 - timer.get_width() // 2, 10))
        lvl = self.fonts["small"].render(self.level.title.upper(), True, DIM_TEXT)
        screen.blit(lvl, (SCREEN_W // 2 - lvl.get_width() // 2, 36))

    def draw_panel(self, screen, h=360):
        overlay = pygame.Surface((SCREEN_W - 160, h), pygame.SRCALPHA)
        overlay.fill((30, 30, 60, 230))
        screen.blit(overlay, (80, 90))

    def draw_instructions(self, screen):
        self.draw_panel(screen, h=400)
        self.draw_centered(screen, TITLE, "big", 110)
        self.draw_centered(screen, self.level.title.upper(), "font", 150, (255, 200, 80))
        self.draw_centered(screen, self.level.focus, "font", 185, DIM_TEXT)
        targets = ", ".join(w.text for w in self.level.targets()[:5])
        avoid = ", ".join(w.text for w in self.level.distractors()[:5])
        lines = [
            f"Goal: catch words with the {self.level.focus.lower()}",
            f"Correct: {targets}",
            f"Avoid: {avoid}",
            f"+{self.config.reward} for correct, -{self.config.reward} for wrong",
            "Arrow keys or A/D move, P pauses",
        ]
        y = 225
        for line in lines:
            for part in utils.wrap_text(line, self.fonts["font"], SCREEN_W - 220):
                self.draw_centered(screen, part, "font", y)
                y += 28

    def draw_game_over(self, screen):
        c = self.controller
        s = c.state
        self.draw_panel(screen, h=420)
        self.draw_centered(screen, "TIME'S UP!", "big", 110, (255, 200, 80))
        self.draw_centered(screen, f"Final Score: {s.score}", "big", 160)
        self.draw_centered(
            screen,
            f"Correct: {s.correct_catches}   Wrong: {s.incorrect_catches}",
            "font",
            215,
        )
        if c.result is not None:
            color = (80, 220, 120) if c.result.outcome == "excellent" else (255, 160, 80)
            for i, part in enumerate(utils.wrap_text(c.result.message, self.fonts["font"], SCREEN_W - 220)):
                self.draw_centered(screen, part, "font", 260 + i * 28, color)

    def draw(self, screen):
        s = self.controller.state
        if self.background is not None:
            screen.blit(pygame.transform.smoothscale(self.background, (SCREEN_W, SCREEN_H)), (0, 0))
        else:
            screen.fill(BG_COLOR)
        if s.phase == st.INSTRUCTIONS:
            self.draw_instructions(screen)
        else:
            self.draw_field(screen)
            if s.phase != st.OVER:
                self.draw_hud(screen)
            if s.phase == st.PAUSED:
                self.draw_panel(screen, h=320)
                self.draw_centered(screen, "Game Paused", "big", 140)
                self.draw_centered(screen, self.level.title, "font", 190, DIM_TEXT)
            elif s.phase == st.COUNTDOWN:
                num = self.fonts["huge"].render(str(s.countdown), True, (255, 220, 80))
                screen.blit(num, num.get_rect(center=(SCREEN_W // 2, SCREEN_H // 2)))
            elif s.phase == st.OVER:
                self.draw_game_over(screen)
        for label, rect, _action, color in self.buttons(s.phase):
            self.draw_button(screen, label, rect, color)

    # -- main run method --
    def run(self):
        pygame.init()
        screen = self.screen or pygame.display.set_mode((SCREEN_W, SCREEN_H))
        pygame.display.set_caption(f"Study Gamify - {TITLE.title()}")
        clock = pygame.time.Clock()
        self.fonts = {
            "small": pygame.font.Font(None, 20),
            "font": pygame.font.Font(None, 28),
            "big": pygame.font.Font(None, 42),
            "huge": pygame.font.Font(None, 140),
        }
        if not self.audio.sfx_bank:
            self.audio.load(self.asset_folder)
        self.background = resources.load_background(self.asset_folder)
        controller = self.build_controller()

        log.info("Starting %s (%s, %d words)", TITLE.title(), self.level.key, len(self.level.words))
        with controller:
            while True:
                dt = clock.tick(60)  # dt in ms
                for event in pygame.event.get():
                    target = self.handle_event(event)
                    if target is not None:
                        log.info("Leaving game: %s", target)
                        return target
                controller.advance(dt)
                self.draw(screen)
                pygame.display.flip()
