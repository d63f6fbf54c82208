import importlib
import logging
import sys
from pathlib import Path

import pygame

import utils
import word_loader
from logging_config import close_game_log, open_game_log, setup_logging
from settings import Settings, run_settings_screen

log = logging.getLogger(__name__)


def discover_games():
    games = []
    gd = Path("games")
    if not gd.exists() or not gd.is_dir():
        return games
    for d in sorted(gd.iterdir()):
        if not d.is_dir() or d.name.startswith("__"):
            continue
        pkg = f"games.{d.name}"
        try:
            mod = importlib.import_module(pkg)
        except ImportError as e:
            log.warning("Skipping game package %s: %s", pkg, e)
            continue
        cls = getattr(mod, "Game", None)
        if cls is None:
            for name in dir(mod):
                if name.endswith("Game"):
                    cls = getattr(mod, name)
                    break
        if cls is not None:
            label = d.name.replace("_", " ").title()
            games.append((d.name, label, cls))
    return games


def level_index(levels, key):
    for i, lv in enumerate(levels):
        if lv.key == key:
            return i
    return 0


def play(game, pkgname, log_dir=""):
    """Run one game with its own log file when log_dir is set."""
    handler = open_game_log(pkgname, log_dir)
    try:
        return game.run()
    finally:
        close_game_log(handler)


def run_menu():
    # load or create settings
    settings = Settings.load()
    setup_logging(settings.log_level)

    pygame.init()
    screen = pygame.display.set_mode((800, 600))
    pygame.display.set_caption("Study Gamify - Main Menu")
    clock = pygame.time.Clock()
    font = pygame.font.Font(None, 28)
    big = pygame.font.Font(None, 40)

    games = discover_games()
    game_idx = 0 if games else -1
    levels = word_loader.discover_levels()
    level_idx = level_index(levels, settings.level)

    while True:
        clock.tick(60)
        choose_game_rect = utils.button_rect(400, 110, w=360, h=44)
        play_rect = utils.button_rect(400, 170, w=360, h=60)
        level_rect = utils.button_rect(400, 260, w=360, h=50)
        settings_rect = utils.button_rect(400, 350, w=360, h=50)
        quit_rect = utils.button_rect(400, 450, w=200, h=44)

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                pygame.quit()
                sys.exit(0)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                mx, my = event.pos
                if play_rect.collidepoint(mx, my):
                    if game_idx < 0:
                        log.warning("No game selected.")
                        continue
                    pkgname, label, cls = games[game_idx]
                    game = cls(levels[level_idx], settings=settings)
                    # let the game load its sounds from its package assets first
                    ls = getattr(game, "load_sounds", None)
                    if callable(ls):
                        ls(Path("games") / pkgname / "assets")
                    result = play(game, pkgname, settings.log_dir)
                    pygame.display.set_caption("Study Gamify - Main Menu")
                    if result == "quit":
                        pygame.quit()
                        sys.exit(0)
                elif level_rect.collidepoint(mx, my):
                    levels = word_loader.discover_levels()
                    level_idx = (level_index(levels, settings.level) + 1) % len(levels)
                    settings.level = levels[level_idx].key
                elif settings_rect.collidepoint(mx, my):
                    current_game = games[game_idx][0] if game_idx >= 0 else None
                    if run_settings_screen(screen, settings, current_game=current_game) == "quit":
                        pygame.quit()
                        sys.exit(0)
                    levels = word_loader.discover_levels()
                    level_idx = level_index(levels, settings.level)
                elif quit_rect.collidepoint(mx, my):
                    pygame.quit()
                    sys.exit(0)
                elif choose_game_rect.collidepoint(mx, my):
                    if games:
                        game_idx = (game_idx + 1) % len(games)

        screen.fill((18, 18, 28))
        title = big.render("Study Gamify", True, (255, 255, 255))
        screen.blit(title, (400 - title.get_width() // 2, 30))

        pygame.draw.rect(screen, (80, 120, 90), choose_game_rect, border_radius=8)
        game_label = games[game_idx][1] if game_idx >= 0 else "None"
        screen.blit(
            font.render(f"Game: {game_label}", True, (255, 255, 255)),
            (choose_game_rect.x + 14, choose_game_rect.y + 10),
        )

        pygame.draw.rect(screen, (60, 120, 180), play_rect, border_radius=8)
        screen.blit(
            font.render("Play", True, (255, 255, 255)),
            (play_rect.x + 14, play_rect.y + 18),
        )

        pygame.draw.rect(screen, (90, 90, 90), level_rect, border_radius=8)
        screen.blit(
            font.render(f"Level: {levels[level_idx].title}", True, (255, 255, 255)),
            (level_rect.x + 14, level_rect.y + 14),
        )

        pygame.draw.rect(screen, (100, 90, 140), settings_rect, border_radius=8)
        screen.blit(
            font.render("Settings", True, (255, 255, 255)),
            (settings_rect.x + 14, settings_rect.y + 14),
        )

        pygame.draw.rect(screen, (120, 60, 80), quit_rect, border_radius=8)
        screen.blit(
            font.render("Quit", True, (255, 255, 255)),
            (quit_rect.x + 64, quit_rect.y + 10),
        )

        hint = font.render(
            "Click 'Level' to cycle word lists (add CSVs to words/).",
            True,
            (180, 180, 180),
        )
        screen.blit(hint, (400 - hint.get_width() // 2, 520))

        pygame.display.flip()


if __name__ == "__main__":
    run_menu()
