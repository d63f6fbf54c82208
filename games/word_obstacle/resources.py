"""Sound and music for the Word Obstacle game.

Package-local assets (games/word_obstacle/assets) are searched first, then
an explicit folder from the caller, then the project-level assets/ folders.
Every mixer call is guarded: a missing file or a broken audio device is
logged and the game keeps running without sound.
"""

import logging
from pathlib import Path

import pygame

log = logging.getLogger(__name__)

EXTS_AUDIO = (".wav", ".ogg", ".mp3", ".flac")
EXTS_IMAGE = [".png", ".bmp", ".gif", ".jpg", ".jpeg", ".webp"]

# sound name -> alternative file stems, in priority order
SFX_ALIASES = {
    "tap": ("tap", "tap-sound", "click"),
    "correct": ("correct", "catch", "ding", "coin"),
    "wrong": ("wrong", "buzz", "miss", "error"),
    "over": ("over", "game_over", "gameover", "end"),
}

PKG_ASSETS = Path(__file__).resolve().parent / "assets"


def candidate_dirs(folder=None, sub=("Sound Effects", "sounds", "Sounds")):
    dirs = [PKG_ASSETS / s for s in sub] + [PKG_ASSETS]
    if folder:
        dirs.append(Path(folder))
    dirs += [Path("assets") / s for s in sub] + [Path("assets"), Path(".")]
    return dirs


def find_file_by_stem(stem, dirs, exts=EXTS_AUDIO):
    for d in dirs:
        if not d.exists() or not d.is_dir():
            continue
        for ext in exts:
            p = d / f"{stem}{ext}"
            if p.exists() and p.is_file():
                return p
    return None


def find_music(choice="", folder=None):
    """Return the music file to loop: the configured choice, else the first track found."""
    dirs = candidate_dirs(folder, sub=("Music", "music"))
    if choice:
        for d in dirs:
            p = d / choice
            if p.exists() and p.is_file():
                return p
        p = Path(choice)
        if p.exists() and p.is_file():
            return p
    for d in dirs[:-1]:
        if not d.exists() or not d.is_dir():
            continue
        for p in sorted(d.iterdir()):
            if p.suffix.lower() in EXTS_AUDIO and p.is_file():
                return p
    return None


def load_background(folder=None):
    dirs = candidate_dirs(folder, sub=("Graphics", "images"))
    for stem in ("background", "space", "sky"):
        p = find_file_by_stem(stem, dirs, exts=EXTS_IMAGE)
        if p is None:
            continue
        try:
            return pygame.image.load(str(p)).convert()
        except pygame.error as e:
            log.warning("Could not load background %s: %s", p, e)
    return None


class AudioPlayer:
    """Background loop plus one-shot effects over pygame.mixer."""

    def __init__(self, sfx_enabled=True, music_enabled=True, music_choice=""):
        self.sfx_enabled = sfx_enabled
        self.music_enabled = music_enabled
        self.music_choice = music_choice
        self.sfx_bank = {}
        self.music_path = None

    @classmethod
    def from_settings(cls, settings):
        if settings is None:
            return cls()
        return cls(
            sfx_enabled=bool(getattr(settings, "sfx", True)),
            music_enabled=bool(getattr(settings, "music", True)),
            music_choice=getattr(settings, "music_choice", "") or "",
        )

    def load(self, folder=None):
        """Populate sfx_bank and pick the music track."""
        try:
            if not pygame.mixer.get_init():
                pygame.mixer.init()
        except pygame.error as e:
            log.warning("Audio device unavailable, playing silently: %s", e)
            return
        dirs = candidate_dirs(folder)
        self.sfx_bank = {}
        for name, stems in SFX_ALIASES.items():
            for stem in stems:
                p = find_file_by_stem(stem, dirs)
                if p is None:
                    continue
                try:
                    self.sfx_bank[name] = pygame.mixer.Sound(str(p))
                    break
                except pygame.error as e:
                    log.warning("Could not load sound %s: %s", p, e)
        self.music_path = find_music(self.music_choice, folder)
        log.debug("Loaded sounds %s, music %s", sorted(self.sfx_bank), self.music_path)

    def start_loop(self, track=None):
        if not self.music_enabled:
            return False
        path = track or self.music_path
        if path is None:
            log.info("No music track found")
            return False
        try:
            pygame.mixer.music.load(str(path))
            pygame.mixer.music.set_volume(0.4)
            pygame.mixer.music.play(-1)
            return True
        except pygame.error as e:
            log.warning("Could not play music %s: %s", path, e)
            return False

    def stop(self):
        try:
            if pygame.mixer.get_init():
                pygame.mixer.music.stop()
        except pygame.error as e:
            log.warning("Could not stop music: %s", e)

    def play_once(self, name):
        if not self.sfx_enabled:
            return
        snd = self.sfx_bank.get(name)
        if snd is None:
            return
        try:
            snd.play()
        except pygame.error as e:
            log.warning("Could not play sound %s: %s", name, e)
