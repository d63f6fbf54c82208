"""
Logging Configuration
Console logging for the launcher, plus an optional log file per game run.
"""
import logging
import sys
from pathlib import Path
from typing import Optional, Union

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATEFMT = '%H:%M:%S'

# handlers installed here; removed again on the next setup_logging()
_installed = []


def resolve_level(level: Union[int, str]) -> int:
    """Accept logging.DEBUG style ints or names like "debug" from settings.json."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(str(level).strip().upper())
    if isinstance(value, int):
        return value
    logging.getLogger(__name__).warning("Unknown log level %r, using INFO", level)
    return logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the root logger.

    Args:
        level: Logging level, an int or a name such as "DEBUG"
        log_file: Optional path to save logs to a file.
    """
    level = resolve_level(level)
    logger = logging.getLogger()
    logger.setLevel(level)

    # Avoid duplicate handlers when the menu is reopened
    for handler in _installed:
        logger.removeHandler(handler)
        handler.close()
    _installed.clear()

    formatter = logging.Formatter(FORMAT, datefmt=DATEFMT)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)
    _installed.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
        _installed.append(file_handler)

    logger.info("Logging initialized.")


def open_game_log(game_key: str, log_dir: str) -> Optional[logging.Handler]:
    """
    Start writing <log_dir>/<game_key>.log for one game run.
    Returns the handler to pass to close_game_log, or None when disabled.
    """
    if not log_dir:
        return None
    path = Path(log_dir) / f"{game_key}.log"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(path, mode='w', encoding='utf-8')
    except OSError as e:
        logging.getLogger(__name__).warning("Could not open game log %s: %s", path, e)
        return None
    handler.setFormatter(logging.Formatter(FORMAT, datefmt=DATEFMT))
    logging.getLogger().addHandler(handler)
    return handler


def close_game_log(handler: Optional[logging.Handler]) -> None:
    if handler is None:
        return
    logging.getLogger().removeHandler(handler)
    handler.close()
