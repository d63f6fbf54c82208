"""
settings.py
Defines Settings data structure, load/save, default values, and the settings UI.
"""

import json
import logging
from dataclasses import dataclass, asdict
from pathlib import Path

# UI dependencies for the settings screen
import pygame
import utils
import word_loader

log = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"

ROUND_PRESETS = [30, 60, 90, 120]  # seconds
LANE_PRESETS = [3, 4, 5]
PRACTICE_PRESETS = [0.25, 0.5, 0.75, 1.0]


@dataclass
class Settings:
    # word list / difficulty key (built-in level or CSV stem in words/)
    level: str = "expert"
    # round length in seconds
    round_seconds: int = 60
    lane_count: int = 3
    # sound effects on/off
    sfx: bool = True
    # music on/off and selection
    music: bool = True
    music_choice: str = ""  # filename
    # wrong catches above correct * practice_ratio -> "needs practice"
    practice_ratio: float = 0.5
    # player identity sent with saved scores
    player_name: str = ""
    user_id: str = ""
    email: str = ""
    # path to a Firebase service account JSON; empty disables saving
    firebase_credentials: str = ""
    # console log level name; log_dir enables one log file per game run
    log_level: str = "INFO"
    log_dir: str = ""

    @staticmethod
    def load(path: str = SETTINGS_FILE):
        p = Path(path)
        if not p.exists():
            return Settings()
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("Could not read %s, using defaults: %s", path, e)
            return Settings()
        if not isinstance(data, dict):
            log.warning("%s does not hold a settings object, using defaults", path)
            return Settings()
        return Settings(**_checked_fields(data))

    def save(self, path: str = SETTINGS_FILE):
        p = Path(path)
        p.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
        log.info("Settings saved to %s", p)


def _checked_fields(data):
    """Keep known fields whose value matches the default's type."""
    defaults = asdict(Settings())
    checked = {}
    for key, value in data.items():
        # allow only dataclass fields (ignore unknown keys)
        if key not in defaults:
            continue
        expected = type(defaults[key])
        if expected is float and isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        # bool is an int subclass; keep the two apart
        if isinstance(value, expected) and (expected is bool) == isinstance(value, bool):
            checked[key] = value
        else:
            log.warning("Ignoring setting %s=%r: expected %s", key, value, expected.__name__)
    return checked


def settings_options(settings, levels=None, music_files=None):
    """Rows shown on the settings screen: (label, field, choices, current)."""
    if levels is None:
        levels = [lv.key for lv in word_loader.discover_levels()]
    if music_files is None:
        music_files = find_music_files()
    return [
        ("Level", "level", levels, settings.level),
        ("Round length (s)", "round_seconds", ROUND_PRESETS, settings.round_seconds),
        ("Lanes", "lane_count", LANE_PRESETS, settings.lane_count),
        ("SFX", "sfx", [True, False], settings.sfx),
        ("Music", "music", [True, False], settings.music),
        ("Music file", "music_choice", [""] + music_files, settings.music_choice),
        ("Practice threshold", "practice_ratio", PRACTICE_PRESETS, settings.practice_ratio),
    ]


def find_music_files(current_game=None):
    """Search game-local music, assets/music, music, then current folder for audio files."""
    exts = (".mp3", ".ogg", ".wav", ".flac")
    candidates = []
    search_dirs = [Path("assets") / "music", Path("music"), Path(".")]
    if current_game:
        search_dirs.insert(0, Path("games") / current_game / "assets" / "Music")
    for d in search_dirs:
        if d.exists() and d.is_dir():
            for p in sorted(d.iterdir()):
                if p.suffix.lower() in exts:
                    name = p.name
                    if name not in candidates:
                        candidates.append(name)
    return candidates


def display_value(value):
    if value is True:
        return "on"
    if value is False:
        return "off"
    if value == "":
        return "None"
    return str(value)


# ---------------------------------------------------------------------
# Settings screen UI function (keeps main.py clean)
# ---------------------------------------------------------------------
def run_settings_screen(screen, settings: Settings, current_game=None):
    """
    Opens an interactive settings UI using pygame.
    Click a row to cycle its value. Save writes settings.json.
    Returns "ok" (closed normally) or "quit" (user requested quit).
    """
    pygame.font.init()
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 26)
    big = pygame.font.Font(None, 36)
    small = pygame.font.Font(None, 18)

    levels = [lv.key for lv in word_loader.discover_levels()]
    music_files = find_music_files(current_game)

    SCREEN_W, SCREEN_H = screen.get_size()
    LEFT_X = 56
    INPUT_X = LEFT_X + 252
    ROW_H = 54
    TOP = 96
    status_msg = ""
    status_timer = 0

    def row_rect(idx):
        return pygame.Rect(INPUT_X, TOP + idx * ROW_H - 8, 300, 36)

    while True:
        dt = clock.tick(60)
        if status_timer > 0:
            status_timer -= dt
            if status_timer <= 0:
                status_msg = ""

        opts = settings_options(settings, levels, music_files)
        back_rect = utils.button_rect(120, SCREEN_H - 40, w=160, h=48)
        save_rect = utils.button_rect(SCREEN_W - 120, SCREEN_H - 40, w=160, h=48)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return "quit"
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return "ok"
            if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                mx, my = event.pos
                if back_rect.collidepoint(mx, my):
                    return "ok"
                if save_rect.collidepoint(mx, my):
                    try:
                        settings.save()
                        status_msg = "Saved."
                    except OSError as e:
                        log.error("Could not save settings: %s", e)
                        status_msg = "Could not save settings."
                    status_timer = 2500
                    continue
                for i, (_label, name, choices, current) in enumerate(opts):
                    if row_rect(i).collidepoint(mx, my):
                        setattr(settings, name, utils.next_choice(choices, current))
                        break

        screen.fill((20, 20, 30))
        title = big.render("Settings", True, (255, 255, 255))
        screen.blit(title, (SCREEN_W // 2 - title.get_width() // 2, 24))
        hint = small.render("Click a value to cycle it.", True, (150, 150, 150))
        screen.blit(hint, (SCREEN_W // 2 - hint.get_width() // 2, 60))

        for i, (label, _name, _choices, current) in enumerate(opts):
            ry = TOP + i * ROW_H
            screen.blit(font.render(label, True, (210, 210, 210)), (LEFT_X, ry))
            val_rect = row_rect(i)
            pygame.draw.rect(screen, (38, 38, 58), val_rect, border_radius=8)
            screen.blit(
                font.render(display_value(current), True, (180, 180, 255)),
                (val_rect.x + 8, val_rect.y + 8),
            )

        if status_msg:
            sm = font.render(status_msg, True, (140, 220, 140))
            screen.blit(sm, (LEFT_X, SCREEN_H - 96))

        pygame.draw.rect(screen, (80, 80, 120), back_rect, border_radius=10)
        screen.blit(
            font.render("Back", True, (255, 255, 255)), (back_rect.x + 54, back_rect.y + 14)
        )
        pygame.draw.rect(screen, (50, 150, 80), save_rect, border_radius=10)
        screen.blit(
            font.render("Save", True, (255, 255, 255)), (save_rect.x + 56, save_rect.y + 14)
        )

        pygame.display.flip()
