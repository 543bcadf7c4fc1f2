import json
import logging
import re
import sys
import time
from typing import Any, Dict

from .config import get_settings


class JsonFormatter(logging.Formatter):
    """JSON formatter that keeps broker credentials out of the logs."""

    def __init__(self):
        super().__init__()
        self.redaction_patterns = [
            # user:password@host in broker URLs
            re.compile(r'(?<=://)([^/\s:@]+):([^/\s@]+)@'),
            # password=..., "password": "..."
            re.compile(r'(?i)("?(?:password|passwd|secret|token)"?\s*[=:]\s*"?)([^"\s,}&]+)'),
        ]

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload: Dict[str, Any] = {
            "ts": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime(record.created)),
            "level": record.levelname,
            "logger": record.name,
            "message": self._redact(record.getMessage()),
        }

        if record.exc_info:
            payload["exc_info"] = self._redact(self.formatException(record.exc_info))

        return json.dumps(payload, ensure_ascii=False)

    def _redact(self, text: str) -> str:
        userinfo, secret_field = self.redaction_patterns
        text = userinfo.sub(r'\1:[REDACTED]@', text)
        return secret_field.sub(r'\1[REDACTED]', text)


def setup_logging() -> None:
    settings = get_settings()
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
