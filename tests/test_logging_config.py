import logging

import pytest

import logging_config
from logging_config import close_game_log, open_game_log, resolve_level, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in logging_config._installed:
        root.removeHandler(handler)
        handler.close()
    logging_config._installed.clear()
    root.setLevel(level)


@pytest.mark.parametrize(
    "value, expected",
    [(logging.DEBUG, logging.DEBUG), ("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("loud", logging.INFO)],
)
def test_resolve_level(value, expected):
    assert resolve_level(value) == expected


def test_setup_logging_does_not_stack_handlers(root_logger, tmp_path):
    setup_logging("DEBUG", log_file=str(tmp_path / "menu.log"))
    setup_logging("INFO")
    assert root_logger.level == logging.INFO
    ours = [h for h in root_logger.handlers if h in logging_config._installed]
    assert len(ours) == 1


def test_game_log_written_per_game(tmp_path):
    handler = open_game_log("word_obstacle", str(tmp_path / "logs"))
    logging.getLogger("games.word_obstacle.controller").warning("Round over: score=15")
    close_game_log(handler)
    assert handler not in logging.getLogger().handlers
    text = (tmp_path / "logs" / "word_obstacle.log").read_text(encoding="utf-8")
    assert "games.word_obstacle.controller - WARNING - Round over: score=15" in text


def test_game_log_disabled_without_dir():
    assert open_game_log("word_obstacle", "") is None
    close_game_log(None)
