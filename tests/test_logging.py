import json
import logging
import re
from io import StringIO

import pytest

from mailbox_provision.logging import (
    JsonFormatter,
    configure_logging,
    get_logger,
    log_with_data,
)

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


@pytest.fixture
def json_logger():
    logger = logging.getLogger("test_mailbox_logging")
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JsonFormatter(color=False))
    logger.addHandler(handler)
    try:
        yield logger, stream
    finally:
        logger.removeHandler(handler)


def test_format_json_log():
    """Test JSON log formatting"""
    formatter = JsonFormatter(color=False)
    record = logging.LogRecord("test", logging.INFO, "test.py", 10, "Test message", (), None)

    data = json.loads(formatter.format(record))

    assert data["level"] == "INFO"
    assert data["msg"] == "Test message"
    assert data["ts"]


@pytest.mark.parametrize(
    "level,expected_color",
    [
        (logging.DEBUG, "\033[34m"),  # BLUE
        (logging.INFO, "\033[32m"),  # GREEN
        (logging.WARNING, "\033[33m"),  # YELLOW
        (logging.ERROR, "\033[31m\033[1m"),  # RED+BOLD
        (logging.CRITICAL, "\033[35m\033[1m"),  # MAGENTA+BOLD
    ],
)
def test_format_json_log_colors(level, expected_color):
    """Test log level color coding"""
    formatter = JsonFormatter()
    record = logging.LogRecord("test", level, "test.py", 10, "Test message", (), None)

    output = formatter.format(record)
    assert output.startswith(expected_color)
    assert output.endswith("\033[0m")
    assert json.loads(ANSI_ESCAPE.sub("", output))["msg"] == "Test message"


def test_event_dict_message(json_logger):
    logger, stream = json_logger

    logger.debug({"event": "cmd_complete", "cmd": ["true"], "returncode": 0})

    data = json.loads(stream.getvalue())
    assert data["msg"] == "cmd_complete"
    assert data["data"] == {"cmd": ["true"], "returncode": 0}


def test_log_with_data_json_structure(json_logger):
    """Test structured logging produces valid JSON"""
    logger, stream = json_logger

    test_data = {"path": "/env", "nested": {"reason": "no_marker"}}
    log_with_data(logger, logging.WARNING, "Re-creating Python environment...", test_data)

    data = json.loads(stream.getvalue())
    assert data["level"] == "WARNING"
    assert data["msg"] == "Re-creating Python environment..."
    assert data["data"] == test_data


def test_log_with_data_without_data(json_logger):
    logger, stream = json_logger

    log_with_data(logger, logging.INFO, "plain")

    assert "data" not in json.loads(stream.getvalue())


def test_get_logger():
    """Test logger retrieval"""
    assert get_logger("test_module").name == "mailbox_provision.test_module"
    assert get_logger("mailbox_provision.cli").name == "mailbox_provision.cli"


def test_configure_logging():
    """Test logging configuration"""
    logger = logging.getLogger("mailbox_provision")
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    try:
        configure_logging("DEBUG", color=False)
        configure_logging("WARNING", color=False)

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0], logging.StreamHandler)
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert not logger.propagate
    finally:
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate
