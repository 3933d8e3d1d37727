"""Logging for the search service: console (optionally colored) plus a plain log file.

Environment:
    LOG_LEVEL  "debug" enables debug output, anything else means info.
    TIMEZONE   pytz zone name for timestamps (default Europe/Berlin).
    ROOT_DIR   if set, logs are also written to <ROOT_DIR>/logs/search.log.
"""

import logging
import logging.config
import os
from datetime import datetime
from logging import Logger

from pytz import timezone

LOGGER_NAME = "portfolio_search"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_ANSI_RESET = "\033[0m"
_ANSI_COLORS: dict[str, str] = {
    "red": "\033[31m",
    "green": "\033[32m",
    "yellow": "\033[33m",
    "blue": "\033[34m",
    "magenta": "\033[35m",
    "cyan": "\033[36m",
    "white": "\033[37m",
}

# highest matching threshold wins
_LEVEL_PREFIXES: tuple[tuple[int, str], ...] = (
    (logging.ERROR, "⛔ "),
    (logging.WARNING, "⚠️ "),
)


def _resolve_loglevel() -> int:
    return logging.DEBUG if os.getenv("LOG_LEVEL", "info").strip().lower() == "debug" else logging.INFO


class CustomFormatter(logging.Formatter):
    """Timestamps in a fixed pytz zone and a symbol in front of warnings and errors."""

    def __init__(self, tz_name: str, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tz = timezone(tz_name)

    def formatTime(self, record, datefmt=None):
        moment = datetime.fromtimestamp(record.created, self.tz)
        return moment.strftime(datefmt) if datefmt else moment.isoformat()

    def format(self, record):
        prefix = next((symbol for level, symbol in _LEVEL_PREFIXES if record.levelno >= level), "")
        # every handler formats the same record, so prefix a copy
        record = logging.makeLogRecord(record.__dict__)
        record.msg = prefix + record.getMessage()
        record.args = ()
        return super().format(record)


class ColoredFormatter(CustomFormatter):
    """Wraps the line in the ANSI color named by the record's ``color`` attribute, if any."""

    def format(self, record) -> str:
        line = super().format(record)
        ansi = _ANSI_COLORS.get(getattr(record, "color", None) or "")
        return f"{ansi}{line}{_ANSI_RESET}" if ansi else line


class ColorLogger:
    """Logger facade whose methods accept ``color=`` (see _ANSI_COLORS).

    The color only reaches the console handler; the file keeps plain text.
    Attributes not defined here are looked up on the wrapped logger.
    """

    def __init__(self, logger: Logger):
        self._logger = logger

    def _log(self, method: str, msg, args: tuple, color: str | None, kwargs: dict) -> None:
        if color is not None:
            kwargs["extra"] = {**(kwargs.get("extra") or {}), "color": color}
        getattr(self._logger, method)(msg, *args, **kwargs)

    def debug(self, msg, *args, color: str | None = None, **kwargs):
        self._log("debug", msg, args, color, kwargs)

    def info(self, msg, *args, color: str | None = None, **kwargs):
        self._log("info", msg, args, color, kwargs)

    def warning(self, msg, *args, color: str | None = None, **kwargs):
        self._log("warning", msg, args, color, kwargs)

    def error(self, msg, *args, color: str | None = None, **kwargs):
        self._log("error", msg, args, color, kwargs)

    def exception(self, msg, *args, color: str | None = None, **kwargs):
        self._log("exception", msg, args, color, kwargs)

    def __getattr__(self, name):
        return getattr(self._logger, name)


def _formatter(formatter_class: type, tz_name: str) -> dict:
    return {"()": formatter_class, "format": LOG_FORMAT, "datefmt": DATE_FORMAT, "tz_name": tz_name}


def setup_logging() -> ColorLogger:
    """Apply the logging configuration and return the service logger."""
    loglevel = _resolve_loglevel()
    tz_name = os.getenv("TIMEZONE", "Europe/Berlin")

    handlers: dict[str, dict] = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "colored",
            "level": loglevel,
            "stream": "ext://sys.stdout",
        },
    }
    root_dir = os.getenv("ROOT_DIR")
    if root_dir:
        log_dir = os.path.join(root_dir, "logs")
        os.makedirs(log_dir, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "plain",
            "level": loglevel,
            "filename": os.path.join(log_dir, "search.log"),
            "encoding": "utf-8",
        }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "plain": _formatter(CustomFormatter, tz_name),
                "colored": _formatter(ColoredFormatter, tz_name),
            },
            "handlers": handlers,
            "root": {"handlers": list(handlers), "level": loglevel},
        }
    )

    # per-request httpx lines only in debug mode
    logging.getLogger("httpx").setLevel(logging.DEBUG if loglevel == logging.DEBUG else logging.WARNING)

    return ColorLogger(logging.getLogger(LOGGER_NAME))
