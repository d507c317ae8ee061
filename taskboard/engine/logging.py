"""
Taskboard Logging — stdlib logging with a structured JSON-lines formatter.

All modules log through named loggers under ``taskboard.``; this module
installs a single handler on the ``taskboard`` logger so entries come out
one compact JSON object per line (or plain text when configured).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from taskboard.engine.config import LoggingConfig

ROOT_LOGGER = "taskboard"
_HANDLER_NAME = "taskboard-handler"

TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


class JsonLogFormatter(logging.Formatter):
    """Render a LogRecord as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        data: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            data["error"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str, separators=(",", ":"))


def configure_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Install (or replace) the taskboard handler. Safe to call repeatedly.

    Returns:
        The ``taskboard`` logger.
    """
    config = config or LoggingConfig()
    root = logging.getLogger(ROOT_LOGGER)

    for handler in list(root.handlers):
        if handler.get_name() == _HANDLER_NAME:
            root.removeHandler(handler)
            handler.close()

    if config.file:
        handler: logging.Handler = logging.FileHandler(config.file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)

    if config.format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    root.addHandler(handler)
    root.setLevel(config.level)
    return root
