"""Application configuration helpers."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

ENV_FILE_CANDIDATES = (Path(".env"), Path(".env.local"))


class Settings(BaseModel):
    """Global application settings loaded from environment variables or .env files."""

    gemini_api_key: Optional[str] = Field(
        default=None,
        description="API key for the generative text and image endpoints.",
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini-compatible API.",
    )
    text_model: str = Field(
        default="gemini-2.0-flash",
        description="Model used for plan, recipe and shopping list generation.",
    )
    image_model: str = Field(
        default="imagen-3.0-generate-002",
        description="Model used for dish photographs.",
    )
    request_timeout: float = Field(
        default=60.0,
        description="Per-request HTTP timeout in seconds.",
    )
    image_retry_attempts: int = Field(
        default=5,
        ge=1,
        description="Maximum attempts for a single dish image request.",
    )
    image_retry_delay: float = Field(
        default=2.0,
        ge=0,
        description="Seconds to wait between failed image attempts.",
    )
    text_retry_attempts: int = Field(
        default=1,
        ge=1,
        description="Maximum attempts for text generation requests.",
    )
    text_retry_delay: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to wait between failed text attempts.",
    )
    error_placeholder_url: str = Field(
        default="https://placehold.co/300x200/ff0000/ffffff?text=Image+Error",
        description="Artifact shown for a day whose image could not be generated.",
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token required for mutating HTTP endpoints.",
    )
    log_level: str = Field(default="INFO", description="Logging level (DEBUG/INFO/WARNING/ERROR)")
    log_format: str = Field(
        default="plain",
        description="Logging format (plain/json).",
    )
    log_requests: bool = Field(
        default=True,
        description="Emit request access logs when true.",
    )

    model_config = ConfigDict(frozen=True)


def _coerce_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _parse_env_file(path: Path) -> dict[str, str]:
    payload: dict[str, str] = {}
    try:
        with path.open("r", encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                key, raw_value = line.split("=", 1)
                payload[key.strip()] = raw_value.strip()
    except FileNotFoundError:
        return {}
    return payload


def _load_env_file_values() -> dict[str, str]:
    values: dict[str, str] = {}
    for candidate in ENV_FILE_CANDIDATES:
        values.update(_parse_env_file(candidate))
    return values


def _load_from_env() -> dict[str, object]:
    """Load optional overrides from env vars (with .env fallbacks)."""

    file_values = _load_env_file_values()

    def _env(key: str) -> Optional[str]:
        return os.environ.get(key) or file_values.get(key)

    payload: dict[str, object] = {}
    if (api_key := _env("WEEKPLATE_GEMINI_API_KEY") or _env("GEMINI_API_KEY")):
        payload["gemini_api_key"] = api_key
    if (base_url := _env("WEEKPLATE_GEMINI_BASE_URL")):
        payload["gemini_base_url"] = base_url
    if (text_model := _env("WEEKPLATE_TEXT_MODEL")):
        payload["text_model"] = text_model
    if (image_model := _env("WEEKPLATE_IMAGE_MODEL")):
        payload["image_model"] = image_model
    if (timeout := _env("WEEKPLATE_REQUEST_TIMEOUT")):
        try:
            payload["request_timeout"] = float(timeout)
        except ValueError:
            pass
    if (image_attempts := _env("WEEKPLATE_IMAGE_RETRY_ATTEMPTS")):
        try:
            payload["image_retry_attempts"] = int(image_attempts)
        except ValueError:
            pass
    if (image_delay := _env("WEEKPLATE_IMAGE_RETRY_DELAY")):
        try:
            payload["image_retry_delay"] = float(image_delay)
        except ValueError:
            pass
    if (text_attempts := _env("WEEKPLATE_TEXT_RETRY_ATTEMPTS")):
        try:
            payload["text_retry_attempts"] = int(text_attempts)
        except ValueError:
            pass
    if (text_delay := _env("WEEKPLATE_TEXT_RETRY_DELAY")):
        try:
            payload["text_retry_delay"] = float(text_delay)
        except ValueError:
            pass
    if (placeholder := _env("WEEKPLATE_ERROR_PLACEHOLDER_URL")):
        payload["error_placeholder_url"] = placeholder
    if (api_token := _env("WEEKPLATE_API_TOKEN")):
        payload["api_token"] = api_token
    if (log_level := _env("WEEKPLATE_LOG_LEVEL")):
        payload["log_level"] = log_level
    if (log_format := _env("WEEKPLATE_LOG_FORMAT")):
        payload["log_format"] = log_format
    if (log_requests := _env("WEEKPLATE_LOG_REQUESTS")):
        payload["log_requests"] = _coerce_bool(log_requests)
    return payload


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings(**_load_from_env())
