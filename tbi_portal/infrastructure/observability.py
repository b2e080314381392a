"""Structured Logging — JSON lines in production, key=value text in development.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Portal ids passed via `extra=` (submission_id, request_id, account_id, ...) are emitted when set
    - setup_logging is idempotent: it replaces its own handler instead of stacking another

Design Decisions:
    - Stdlib logging with a small formatter pair, no logging framework dependency
"""

import json
import logging
from datetime import datetime, timezone

HANDLER_NAME = "tbi_portal"

CONTEXT_KEYS = (
    "request_id", "submission_id", "account_id", "mentor_id", "startup_id", "event_id",
    "error_code", "error_kind", "path", "email_to",
)


def _context(record: logging.LogRecord) -> dict:
    return {
        key: record.__dict__[key]
        for key in CONTEXT_KEYS
        if record.__dict__.get(key) is not None
    }


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable line with the portal ids appended as key=value."""

    def __init__(self):
        super().__init__("%(asctime)s %(levelname)-7s %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + " ".join(f"{k}={v}" for k, v in context.items())
        return line


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler()
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(JSONFormatter() if fmt == "json" else TextFormatter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
