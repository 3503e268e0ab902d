from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from typing import Final

from forest_host.config import HostSettings

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
AGENT_LOGGER_NAME: Final[str] = "forest_host.agent"

_AGENT_LEVELS: Final[dict[str, int]] = {
    "Debug": logging.DEBUG,
    "Info": logging.INFO,
    "Warn": logging.WARNING,
    "Error": logging.ERROR,
}


def configure_logging(level: int = logging.INFO) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=[logging.StreamHandler()])


def attach_log_file(settings: HostSettings) -> RotatingFileHandler | None:
    """Add a rotating file handler on the root logger when LOG_FILE is set."""

    if settings.log_file is None:
        return None

    root = logging.getLogger()
    # Avoid adding duplicate handlers if configured twice
    for handler in root.handlers:
        if isinstance(handler, RotatingFileHandler):
            return handler

    settings.log_file.parent.mkdir(parents=True, exist_ok=True)
    file_handler = RotatingFileHandler(
        settings.log_file,
        maxBytes=settings.log_max_size_mb * 1024 * 1024,
        backupCount=settings.log_backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
    return file_handler


def agent_log_level(level: str) -> int:
    return _AGENT_LEVELS.get(level, logging.INFO)


class LoggingAgentLogger:
    """Routes the admin agent's ``log(level, message)`` calls into stdlib logging."""

    def __init__(self, level: str = "Info", *, name: str = AGENT_LOGGER_NAME) -> None:
        self._logger = logging.getLogger(name)
        self._logger.setLevel(agent_log_level(level))

    def log(self, level: str, message: str) -> None:
        self._logger.log(agent_log_level(level), "%s", message)
