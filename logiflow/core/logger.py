"""Logging setup for the API process and the Celery worker.

Every module logs through ``logging.getLogger(__name__)``, so all engine
output lives under the ``logiflow`` logger tree. ``setup_from_settings``
attaches the handlers to that package logger once and applies the level
of the package and of any module overridden in ``Settings.log_levels``.
"""

import logging
import logging.handlers
import os
from typing import Dict, Optional

from logiflow.core.config import Settings, get_settings

PACKAGE_LOGGER = "logiflow"
LOG_FORMAT = "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"  # ISO 8601

CONSOLE_HANDLER = "logiflow.console"
FILE_HANDLER = "logiflow.file"

LEVELS: Dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def parse_level(level: str) -> int:
    try:
        return LEVELS[level.upper()]
    except KeyError:
        raise ValueError(
            f"Invalid log level: {level}. Must be one of: {', '.join(LEVELS)}"
        ) from None


def _handler_names(logger: logging.Logger) -> set:
    return {handler.get_name() for handler in logger.handlers}


def _file_handler(settings: Settings, formatter: logging.Formatter) -> logging.Handler:
    os.makedirs(settings.log_dir, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        os.path.join(settings.log_dir, settings.log_file_name),
        maxBytes=settings.log_max_bytes,
        backupCount=settings.log_backup_count,
    )
    handler.set_name(FILE_HANDLER)
    handler.setFormatter(formatter)
    return handler


def setup_from_settings(settings: Optional[Settings] = None) -> logging.Logger:
    """Configure the ``logiflow`` logger tree from application settings.

    Safe to call more than once (API import, worker process init, tests):
    handlers are added only if missing, levels are always re-applied.

    Args:
        settings: Settings to apply; the cached application settings by default

    Returns:
        The package logger

    Raises:
        ValueError: If a configured level name is unknown
    """
    settings = settings or get_settings()
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(parse_level(settings.log_level))

    for module, level in settings.log_levels.items():
        name = module if module.startswith(PACKAGE_LOGGER + ".") else f"{PACKAGE_LOGGER}.{module}"
        logging.getLogger(name).setLevel(parse_level(level))

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    attached = _handler_names(logger)

    if CONSOLE_HANDLER not in attached:
        console = logging.StreamHandler()
        console.set_name(CONSOLE_HANDLER)
        console.setFormatter(formatter)
        logger.addHandler(console)

    if settings.log_to_file and FILE_HANDLER not in attached:
        logger.addHandler(_file_handler(settings, formatter))

    return logger
