"""Centralized logging configuration using Loguru.

Usage:
    from drizzleaudit.utils.logging import logger
    logger.info("Message")
    logger.debug("Debug message")  # Only shows if DRIZZLEAUDIT_LOG_LEVEL=DEBUG

Environment Variables:
    DRIZZLEAUDIT_LOG_LEVEL: DEBUG|INFO|WARNING|ERROR (default: INFO)
    DRIZZLEAUDIT_LOG_JSON: 0|1 (default: 0, human-readable)
    DRIZZLEAUDIT_LOG_FILE: path to log file (optional)
"""

import json
import os
import sys

from loguru import logger

# Remove default handler
logger.remove()

_log_level = os.environ.get("DRIZZLEAUDIT_LOG_LEVEL", "INFO").upper()
_json_mode = os.environ.get("DRIZZLEAUDIT_LOG_JSON", "0") == "1"
_log_file = os.environ.get("DRIZZLEAUDIT_LOG_FILE")


def _ndjson_record(message) -> str:
    record = message.record
    payload = {
        "level": record["level"].name,
        "time": int(record["time"].timestamp() * 1000),
        "msg": record["message"],
        "module": record["name"],
        "pid": record["process"].id,
    }
    for key, value in record["extra"].items():
        payload[key] = value
    if record["exception"]:
        payload["err"] = {
            "type": record["exception"].type.__name__ if record["exception"].type else "Error",
            "message": str(record["exception"].value) if record["exception"].value else "",
        }
    return json.dumps(payload, default=str)


def ndjson_sink(message):
    """Write one JSON object per log record to stderr."""
    # Never call logger.* inside a sink
    sys.stderr.write(_ndjson_record(message) + "\n")
    sys.stderr.flush()


# No emojis - Windows CP1252 compatibility
_human_format = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}:{function}:{line}</cyan> - "
    "<level>{message}</level>"
)

logger.level("DEBUG", color="<blue>")
logger.level("INFO", color="<white>")
logger.level("WARNING", color="<yellow>")
logger.level("ERROR", color="<red>")

_console_handler_id: int | None = None


def _add_console_handler(level: str) -> int:
    if _json_mode:
        return logger.add(ndjson_sink, level=level, colorize=False)
    return logger.add(
        sys.stderr,
        level=level,
        format=_human_format,
        colorize=None,  # Auto-detect: colors if TTY, plain if piped
    )


_console_handler_id = _add_console_handler(_log_level)

if _log_file:

    def _file_sink(message):
        """Append NDJSON records to the configured log file."""
        with open(_log_file, "a", encoding="utf-8") as f:
            f.write(_ndjson_record(message) + "\n")

    logger.add(_file_sink, level="DEBUG")


def configure_log_level(level: str) -> None:
    """Replace the console handler with one at ``level``.

    The CLI calls this for --verbose/--quiet; the environment variable
    still decides the initial level.
    """
    global _console_handler_id, _log_level

    _log_level = level.upper()
    if _console_handler_id is not None:
        try:
            logger.remove(_console_handler_id)
        except ValueError:
            pass  # Already removed
    _console_handler_id = _add_console_handler(_log_level)


__all__ = [
    "logger",
    "configure_log_level",
]
