"""Tests for logging utilities."""

import logging
import sys
from io import StringIO

from optimkit.log import configure_logging, get_logger, set_log_level


def test_get_logger_returns_namespaced_logger():
    logger = get_logger("test_module")
    assert isinstance(logger, logging.Logger)
    assert logger.name == "optimkit.test_module"


def test_get_logger_keeps_optimkit_prefix():
    assert get_logger("optimkit.core.solver").name == "optimkit.core.solver"
    assert get_logger().name == "optimkit"


def test_get_logger_caching():
    assert get_logger("test_module") is get_logger("test_module")
    assert get_logger("module1") is not get_logger("module2")


def test_logger_has_single_handler_and_does_not_propagate():
    logger = get_logger("handler_check")
    get_logger("handler_check")
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_configure_logging_redirects_output():
    logger = get_logger("test_module")
    captured = StringIO()
    try:
        configure_logging(level=logging.INFO, stream=captured)
        logger.info("Test message")
        output = captured.getvalue()
        assert "Test message" in output
        assert "[INFO] optimkit.test_module:" in output
    finally:
        configure_logging(level=logging.WARNING, stream=sys.__stderr__)


def test_configure_logging_custom_format():
    logger = get_logger("fmt_module")
    captured = StringIO()
    try:
        configure_logging(level="WARNING", format_string="%(levelname)s|%(message)s", stream=captured)
        logger.info("hidden")
        logger.warning("shown")
        assert captured.getvalue().strip() == "WARNING|shown"
    finally:
        configure_logging(level=logging.WARNING, stream=sys.__stderr__)


def test_set_log_level_updates_existing_loggers():
    logger = get_logger("level_module")
    try:
        set_log_level(logging.DEBUG)
        assert logger.level == logging.DEBUG
        set_log_level("info")
        assert logger.level == logging.INFO
    finally:
        set_log_level(logging.WARNING)
    assert logger.level == logging.WARNING


def test_new_loggers_use_current_default_level():
    try:
        set_log_level(logging.ERROR)
        assert get_logger("created_after_level_change").level == logging.ERROR
    finally:
        set_log_level(logging.WARNING)
