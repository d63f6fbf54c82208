import json

import pytest

import utils
from settings import Settings, display_value, settings_options
from games.word_obstacle.state import RoundConfig


def test_defaults_when_file_missing(tmp_path):
    s = Settings.load(tmp_path / "settings.json")
    assert s == Settings()
    assert s.round_seconds == 60
    assert s.lane_count == 3


def test_save_and_load_round_trip(tmp_path):
    path = tmp_path / "settings.json"
    Settings(level="beginner", round_seconds=30, sfx=False, user_id="u1").save(path)
    loaded = Settings.load(path)
    assert loaded.level == "beginner"
    assert loaded.round_seconds == 30
    assert loaded.sfx is False
    assert loaded.user_id == "u1"


def test_unknown_keys_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"lane_count": 4, "lives": 3}), encoding="utf-8")
    assert Settings.load(path).lane_count == 4


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    assert Settings.load(path) == Settings()


@pytest.mark.parametrize("content", ["[1, 2]", '"expert"', "null", "42"])
def test_json_that_is_not_an_object_gives_defaults(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    assert Settings.load(path) == Settings()


def test_wrong_typed_fields_are_dropped(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(
        json.dumps(
            {
                "lane_count": "three",
                "round_seconds": True,
                "sfx": 0,
                "practice_ratio": 1,
                "level": "beginner",
            }
        ),
        encoding="utf-8",
    )
    s = Settings.load(path)
    assert s.lane_count == 3
    assert s.round_seconds == 60
    assert s.sfx is True
    assert s.practice_ratio == 1.0
    assert s.level == "beginner"
    c = RoundConfig.from_settings(s)
    assert c.lane_count == 3
    assert c.round_seconds == 60


def test_next_choice_wraps_and_recovers():
    assert utils.next_choice([30, 60, 90], 60) == 90
    assert utils.next_choice([30, 60, 90], 90) == 30
    assert utils.next_choice([30, 60, 90], 45) == 30
    assert utils.next_choice([True, False], True) is False
    assert utils.next_choice([], "x") == "x"


def test_settings_options_rows():
    s = Settings()
    rows = settings_options(s, levels=["beginner", "expert"], music_files=["a.ogg"])
    fields = [r[1] for r in rows]
    assert fields == [
        "level",
        "round_seconds",
        "lane_count",
        "sfx",
        "music",
        "music_choice",
        "practice_ratio",
    ]
    music = dict((r[1], r[2]) for r in rows)["music_choice"]
    assert music == ["", "a.ogg"]


def test_display_value():
    assert display_value(True) == "on"
    assert display_value(False) == "off"
    assert display_value("") == "None"
    assert display_value(0.5) == "0.5"


def test_round_config_from_settings():
    c = RoundConfig.from_settings(Settings(round_seconds=90, lane_count=4, practice_ratio=0.25), level="advanced")
    assert c.round_seconds == 90
    assert c.lane_count == 4
    assert c.start_lane == 2
    assert c.practice_ratio == 0.25
    assert c.level == "advanced"
