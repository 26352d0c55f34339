"""
Logging setup for the LOTO Forms service.

Two output shapes share one root handler:
  readable  coloured single lines for a developer terminal
  json      one object per line for log shipping

LOG_FORMAT forces a shape; otherwise debug/testing apps get readable output
and everything else gets JSON. LOG_LEVEL sets the threshold.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Request context attached by the timing middleware via ``extra=``.
CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status",
    "duration_ms",
    "remote_addr",
    "procedure_id",
)

_QUIET_LOGGERS = ("werkzeug", "sqlalchemy.engine", "PIL", "alembic")


def _context(record: logging.LogRecord) -> dict:
    return {
        key: getattr(record, key)
        for key in CONTEXT_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        entry.update(_context(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Short coloured lines; the procedure id and duration trail the message."""

    LEVEL_COLORS = {
        "DEBUG": "\033[2m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        when = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        level = f"{record.levelname:<7}"
        if self.use_color:
            level = f"{self.LEVEL_COLORS.get(record.levelname, '')}{level}{self.RESET}"

        line = f"{when} {level} {record.name}: {record.getMessage()}"
        procedure_id = getattr(record, "procedure_id", None)
        if procedure_id:
            line += f" procedure={procedure_id}"
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" ({duration:.0f}ms)"
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _pick_formatter(app) -> logging.Formatter:
    forced = os.getenv("LOG_FORMAT", "").lower()
    if forced == "json":
        return JSONFormatter()
    if forced == "readable" or app.debug or app.testing:
        return ReadableFormatter(use_color=sys.stderr.isatty())
    return JSONFormatter()


def configure_logging(app):
    """Install the root handler for ``app`` and quiet chatty libraries.

    Safe to call once per app instance; handlers from earlier calls are
    replaced, not stacked.
    """
    default_level = "DEBUG" if app.debug else "INFO"
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_pick_formatter(app))

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)
    app.logger.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not app.testing:
        app.logger.info("Logging ready level=%s formatter=%s",
                        level_name, type(handler.formatter).__name__)
