"""Tests for logging setup."""

import logging

import pytest

from logiflow.core.config import Settings
from logiflow.core.logger import (
    CONSOLE_HANDLER,
    FILE_HANDLER,
    PACKAGE_LOGGER,
    parse_level,
    setup_from_settings,
)


@pytest.fixture
def package_logger():
    """Restore the package logger (and the overridden module logger) after each test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    module_logger = logging.getLogger("logiflow.core.approval")
    saved = (list(logger.handlers), logger.level, module_logger.level)
    logger.handlers = []
    yield logger
    for handler in logger.handlers:
        if handler not in saved[0]:
            handler.close()
    logger.handlers = saved[0]
    logger.setLevel(saved[1])
    module_logger.setLevel(saved[2])


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


def test_console_handler_from_settings(package_logger):
    logger = setup_from_settings(_settings(log_level="debug"))

    assert logger is package_logger
    assert logger.level == logging.DEBUG
    assert [h.get_name() for h in logger.handlers] == [CONSOLE_HANDLER]


def test_handlers_attached_once(package_logger):
    setup_from_settings(_settings())
    logger = setup_from_settings(_settings(log_level="WARNING"))

    assert len(logger.handlers) == 1
    assert logger.level == logging.WARNING


def test_file_logging(package_logger, tmp_path):
    settings = _settings(log_to_file=True, log_dir=str(tmp_path / "logs"), log_file_name="approvals.log")
    setup_from_settings(settings)

    logging.getLogger("logiflow.core.approval.service").info("approval step decided")
    for handler in package_logger.handlers:
        handler.flush()

    assert FILE_HANDLER in [h.get_name() for h in package_logger.handlers]
    assert "approval step decided" in (tmp_path / "logs" / "approvals.log").read_text()


def test_module_level_overrides(package_logger):
    setup_from_settings(_settings(log_level="WARNING", log_levels={"core.approval": "DEBUG"}))

    assert package_logger.level == logging.WARNING
    assert logging.getLogger("logiflow.core.approval").level == logging.DEBUG
    assert logging.getLogger("logiflow.core.approval.machine").isEnabledFor(logging.DEBUG)
    assert not logging.getLogger("logiflow.services.audit").isEnabledFor(logging.INFO)


def test_invalid_level(package_logger):
    with pytest.raises(ValueError, match="Invalid log level"):
        setup_from_settings(_settings(log_level="LOUD"))


def test_parse_level():
    assert parse_level("error") == logging.ERROR
    with pytest.raises(ValueError):
        parse_level("TRACE")
