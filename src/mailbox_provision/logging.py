"""Logging configuration and JSON output formatting."""

import json
import logging
import sys
from typing import Any, Dict, Optional

APP_LOGGER = "mailbox_provision"


class ColorCodes:
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    BOLD = "\033[1m"


LEVEL_COLORS = {
    "DEBUG": ColorCodes.BLUE,
    "INFO": ColorCodes.GREEN,
    "WARNING": ColorCodes.YELLOW,
    "ERROR": ColorCodes.RED + ColorCodes.BOLD,
    "CRITICAL": ColorCodes.MAGENTA + ColorCodes.BOLD,
}


class JsonFormatter(logging.Formatter):
    """Format log records as single-line JSON, optionally color-coded."""

    def __init__(self, color: bool = True):
        super().__init__()
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        output = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        # Event dicts: logger.debug({"event": "name", **fields})
        if isinstance(record.msg, dict):
            fields = dict(record.msg)
            output["msg"] = fields.pop("event", "")
            if fields:
                output["data"] = fields

        if hasattr(record, "data"):
            output["data"] = record.data

        json_str = json.dumps(output, default=str)
        if not self.color:
            return json_str

        color = LEVEL_COLORS.get(record.levelname, "")
        return f"{color}{json_str}{ColorCodes.RESET}"


def configure_logging(level: str = "INFO", color: Optional[bool] = None) -> None:
    """Set up application logging with JSON formatting on stderr."""
    app_logger = logging.getLogger(APP_LOGGER)

    if color is None:
        color = sys.stderr.isatty()

    # Reconfiguring replaces the handler instead of stacking another one
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter(color=color))

    app_logger.setLevel(getattr(logging, level.upper()))
    app_logger.addHandler(handler)
    app_logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance below the application logger."""
    if name.startswith(f"{APP_LOGGER}.") or name == APP_LOGGER:
        return logging.getLogger(name)
    return logging.getLogger(f"{APP_LOGGER}.{name}")


def log_with_data(
    logger: logging.Logger, level: int, msg: str, data: Dict[str, Any] = None
):
    """Log a message with optional structured data."""
    if data:
        logger.log(level, msg, extra={"data": data})
    else:
        logger.log(level, msg)
