"""Logging setup for applications embedding this library.

When DEBUG is on, logs in human-readable format for local development.
Otherwise logs as single-line JSON for log aggregators.
"""

import json
import logging
import sys
from datetime import datetime, timezone

from encoding_aware.config import get_settings


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)

        for key in ("entity", "field"):
            value = getattr(record, key, None)
            if value:
                payload[key] = value

        return json.dumps(payload, default=str)


def setup_logging() -> None:
    """Configure the root logger based on the DEBUG setting."""
    settings = get_settings()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)

    if settings.debug:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(JSONFormatter())

    root.addHandler(handler)

    # Statement echo is noisy once every column goes through a converter
    if not settings.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
