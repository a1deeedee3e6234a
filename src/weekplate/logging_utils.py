"""Logging setup with redaction of API tokens and Gemini keys."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional, Sequence

REDACTED = "[redacted]"

# Each pattern keeps group 1 (the marker) and masks group 2 (the value).
_TOKEN_PATTERNS = (
    re.compile(r"(Bearer\s+)([A-Za-z0-9\-._~+/=]+)", re.IGNORECASE),
    re.compile(r"(api_token=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"(X-API-Key=)([^&\s]+)", re.IGNORECASE),
    re.compile(r"([?&]key=)([^&\s]+)", re.IGNORECASE),
)

# Loggers that emit request URLs or headers; httpx logs `?key=` URLs at INFO.
_THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "httpx")

_CONTEXT_FIELDS = ("request_id", "day")


def redact(text: str, secrets: Sequence[str] = ()) -> str:
    for pattern in _TOKEN_PATTERNS:
        text = pattern.sub(r"\1" + REDACTED, text)
    for secret in secrets:
        text = text.replace(secret, REDACTED)
    return text


class SensitiveDataFilter(logging.Filter):
    """Rewrite the message and context fields of each record with secrets masked."""

    def __init__(self, secrets: Iterable[str]):
        super().__init__()
        self._secrets = tuple(secret.strip() for secret in secrets if secret and secret.strip())

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message, self._secrets)
        if cleaned != message:
            record.msg, record.args = cleaned, ()
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if isinstance(value, str):
                setattr(record, field, redact(value, self._secrets))
        return True


def _context(record: logging.LogRecord) -> dict[str, str]:
    return {field: value for field in _CONTEXT_FIELDS if (value := getattr(record, field, None))}


class PlainFormatter(logging.Formatter):
    """Pipe-separated lines with ``request_id``/``day`` appended when present."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if not context:
            return line
        suffix = " ".join(f"{key}={value}" for key, value in context.items())
        return f"{line} | {suffix}"


class JsonFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context(record),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(level_name: str, fmt: Optional[str], secrets: Iterable[str]) -> None:
    """Send all weekplate and third-party records through one redacting handler."""

    level = getattr(logging, level_name.upper(), logging.INFO)
    redactor = SensitiveDataFilter(secrets)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter() if (fmt or "").lower() == "json" else PlainFormatter())
    handler.addFilter(redactor)

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(level)

    for name in _THIRD_PARTY_LOGGERS:
        third_party = logging.getLogger(name)
        third_party.handlers = []
        third_party.setLevel(level)
        third_party.propagate = True
        third_party.addFilter(redactor)


__all__ = ["JsonFormatter", "PlainFormatter", "SensitiveDataFilter", "configure_logging", "redact"]
