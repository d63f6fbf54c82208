"""
word_loader.py
Word catalogs for the phonics games: built-in levels plus CSV loading.
"""

import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

log = logging.getLogger(__name__)

WORDS_DIR = "words"
TRUE_VALUES = ("1", "true", "yes", "y", "correct", "target")


@dataclass(frozen=True)
class WordDefinition:
    text: str
    is_correct: bool


@dataclass(frozen=True)
class Level:
    key: str
    title: str
    focus: str
    words: Tuple[WordDefinition, ...]

    def targets(self):
        return [w for w in self.words if w.is_correct]

    def distractors(self):
        return [w for w in self.words if not w.is_correct]


def _catalog(targets, distractors):
    return tuple(WordDefinition(t, True) for t in targets) + tuple(
        WordDefinition(d, False) for d in distractors
    )


BUILTIN_LEVELS: Dict[str, Level] = {
    "beginner": Level(
        key="beginner",
        title="Beginner Level",
        focus="Short A Vowel Sound",
        words=_catalog(
            ["cat", "hat", "map", "bag", "fan", "jam", "cap", "ram"],
            ["sit", "dog", "cup", "bed", "pin", "hop", "sun", "net"],
        ),
    ),
    "advanced": Level(
        key="advanced",
        title="Advanced Level",
        focus="Long A and I Vowel Sounds",
        words=_catalog(
            ["cake", "lane", "gate", "rain", "bike", "kite", "time", "pine"],
            ["cat", "sit", "cup", "bed", "dog", "pen", "hat", "bus"],
        ),
    ),
    "expert": Level(
        key="expert",
        title="Expert Level",
        focus="Long E, O, U Vowel Sounds",
        words=_catalog(
            [
                "team", "bead", "leaf", "seal",
                "rope", "bone", "cone", "vote",
                "cube", "mule", "fuse", "tune",
            ],
            ["cat", "sit", "cup", "bed", "dog", "pen", "hat", "bus", "rat", "mug"],
        ),
    ),
}


def parse_flag(value):
    """Return True for the usual spellings of 'this is a target word'."""
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def load_words(csv_path: str) -> List[WordDefinition]:
    """
    Read a CSV with columns 'word' and 'correct' and return WordDefinitions.
    Rows without a word are skipped; duplicate words keep their first row.
    """
    words = []
    seen = set()
    try:
        with open(csv_path, encoding="utf-8") as f:
            reader = csv.DictReader(f)
            for r in reader:
                text = (r.get("word") or "").strip()
                if not text or text.lower() in seen:
                    continue
                seen.add(text.lower())
                words.append(WordDefinition(text, parse_flag(r.get("correct"))))
    except FileNotFoundError:
        log.warning("Word list %s not found", csv_path)
        return []
    except (OSError, csv.Error) as e:
        # keep whatever was read before the bad row
        log.warning("Could not read word list %s: %s", csv_path, e)
    return words


def level_from_csv(csv_path) -> Level:
    p = Path(csv_path)
    title = p.stem.replace("_", " ").title()
    return Level(key=p.stem, title=title, focus=title, words=tuple(load_words(p)))


def discover_levels(folder=WORDS_DIR) -> List[Level]:
    """Built-in levels first, then one level per usable CSV in `folder`."""
    levels = list(BUILTIN_LEVELS.values())
    d = Path(folder)
    if not d.exists() or not d.is_dir():
        return levels
    for p in sorted(d.glob("*.csv")):
        if p.stem in BUILTIN_LEVELS:
            continue
        level = level_from_csv(p)
        # a round needs at least one target and one distractor
        if level.targets() and level.distractors():
            levels.append(level)
        else:
            log.info("Skipping word list %s: needs target and distractor words", p)
    return levels


def get_level(key, folder=WORDS_DIR) -> Level:
    for level in discover_levels(folder):
        if level.key == key:
            return level
    return BUILTIN_LEVELS["expert"]
