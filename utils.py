"""
utils.py
Small UI and helper utilities used by the main menu, settings and games.
"""

import pygame


def wrap_text(text, font, max_width):
    """Split text into lines that fit max_width for the given font."""
    lines = []
    cur = ""
    for w in text.split():
        trial = (cur + " " + w).strip()
        if not cur or font.size(trial)[0] <= max_width:
            cur = trial
        else:
            lines.append(cur)
            cur = w
    if cur:
        lines.append(cur)
    return lines


def button_rect(mid_x, mid_y, w=300, h=50):
    r = pygame.Rect(0, 0, w, h)
    r.center = (mid_x, mid_y)
    return r


def next_choice(choices, current):
    """Return the value after `current` in `choices`, wrapping around."""
    if not choices:
        return current
    try:
        idx = choices.index(current)
    except ValueError:
        return choices[0]
    return choices[(idx + 1) % len(choices)]
