from dataclasses import replace

import pytest

import utils
from games.word_obstacle import state as st
from games.word_obstacle.game import HIT_WORD_CIRCLE, WORD_CIRCLE, visible_words, word_colors
from games.word_obstacle.helpers import format_seconds, lane_x, word_screen_y, FIELD_TOP


class FakeFont:
    """Every character is 10px wide."""

    def size(self, text):
        return (len(text) * 10, 12)


def test_wrap_text_breaks_on_width():
    lines = utils.wrap_text("catch the long vowel words", FakeFont(), 100)
    assert lines == ["catch the", "long vowel", "words"]


def test_wrap_text_keeps_long_first_word():
    assert utils.wrap_text("supercalifragilistic cat", FakeFont(), 50) == [
        "supercalifragilistic",
        "cat",
    ]
    assert utils.wrap_text("", FakeFont(), 50) == []


@pytest.mark.parametrize("lane, expected", [(0, 133), (1, 400), (2, 666)])
def test_lane_x_centers_lanes(lane, expected):
    assert lane_x(lane, 3, 800) == expected


def test_word_screen_y_offsets_field():
    assert word_screen_y(0) == FIELD_TOP
    assert word_screen_y(350) == FIELD_TOP + 350


@pytest.mark.parametrize("seconds, text", [(60, "1:00"), (59, "0:59"), (5, "0:05"), (-3, "0:00")])
def test_format_seconds(seconds, text):
    assert format_seconds(seconds) == text


def test_caught_words_are_drawn_dimmed_until_removed():
    config = st.RoundConfig()
    caught = st.FallingWord(1, "team", True, lane=1, y=352)
    falling = st.FallingWord(2, "cat", False, lane=0, y=100)
    s = replace(st.start(st.new_round(config), config), falling_words=(caught, falling))
    s, _ = st.detect_collisions(s, config)

    drawn = visible_words(s)
    assert [w.id for w in drawn] == [1, 2]
    assert word_colors(drawn[0])[0] == HIT_WORD_CIRCLE
    assert word_colors(drawn[1])[0] == WORD_CIRCLE

    assert [w.id for w in visible_words(st.remove_word(s, 1))] == [2]
    assert visible_words(st.pause(s)) == ()
