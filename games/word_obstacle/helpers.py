"""Screen geometry and small formatting helpers for the Word Obstacle game."""

SCREEN_W = 800
SCREEN_H = 600
# falling-word y=0 is drawn this far below the top of the window
FIELD_TOP = 40
PLAYER_Y = SCREEN_H - 110

BG_COLOR = (18, 18, 40)
LANE_COLOR = (34, 34, 64)
TEXT_COLOR = (255, 255, 255)
DIM_TEXT = (180, 180, 200)
WORD_COLOR = (255, 220, 120)
HIT_WORD_COLOR = (140, 125, 90)


def lane_x(lane, lane_count, width=SCREEN_W):
    """Center x of a lane; lanes split the width evenly."""
    slot = width / float(lane_count)
    return int(slot * lane + slot / 2)


def word_screen_y(y):
    return FIELD_TOP + int(y)


def format_seconds(seconds):
    """Format whole seconds as M:SS."""
    s = max(0, int(seconds))
    return f"{s // 60}:{s % 60:02d}"
