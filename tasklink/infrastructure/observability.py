"""Structured Logging: JSON formatter and one-shot setup.

Invariants:
    - Every line includes timestamp, level, logger name, and message
    - Relationship context (user_id, task_id, operation) and error_code/path
      are surfaced when a call passes them via extra=
    - setup_logging is idempotent: calling it twice does not duplicate handlers

Design Decisions:
    - stdlib logging + small JSONFormatter over a logging dependency (ADR: zero dependencies)
    - "text" format for local development, "json" for deployments
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_FIELDS = ("user_id", "task_id", "operation", "error_code", "path")

_HANDLER_NAME = "tasklink"


class JSONFormatter(logging.Formatter):
    """Format records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the TaskLink handler on the root logger."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
