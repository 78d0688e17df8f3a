import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from rental_policies.core.config import settings

# Structured extras copied into the JSON line when set on the record
_EXTRA_FIELDS = ("user_id", "property_id", "policy_id", "reservation_id", "agreement_id")


class JsonFormatter(logging.Formatter):
    """One JSON object per log line: timestamp, level, logger, message, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)

        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level: str | None = None) -> None:
    """Install the JSON formatter on the root logger."""
    level = (level or settings.log_level).upper()

    root = logging.getLogger()
    root.setLevel(level)

    # Clear existing handlers (uvicorn reload installs its own)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
