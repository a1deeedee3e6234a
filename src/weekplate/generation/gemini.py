"""Async client for Gemini text generation and Imagen image prediction."""

from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, Optional, Sequence, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from weekplate.config import Settings, get_settings
from weekplate.fetch.retry import RetryPolicy, Sleep, TransientFetchFailure, attempt
from weekplate.models.recipe import DetailRecord, PlanPreferences, RawPlanEntry
from weekplate.models.schedule import DAYS, Slot

from . import prompts

logger = logging.getLogger(__name__)

T = TypeVar("T")

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*([\[{].*?[\]}])\s*```", re.DOTALL)


class _Meals(BaseModel):
    dinner: str


class _PlanDay(BaseModel):
    day: str
    meals: _Meals


_PLAN_ADAPTER = TypeAdapter(list[_PlanDay])


def _extract_json_blob(text: str) -> str:
    """Return the JSON object or array embedded in raw model text."""

    match = _JSON_BLOCK_RE.search(text)
    if match:
        return match.group(1).strip()

    starts = [index for index in (text.find("["), text.find("{")) if index != -1]
    if starts:
        start = min(starts)
        closer = "]" if text[start] == "[" else "}"
        end = text.rfind(closer)
        if end > start:
            return text[start : end + 1].strip()
    return text.strip()


def _candidate_text(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    candidates = body.get("candidates") or []
    if not candidates:
        return None
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    if not parts:
        return None
    text = parts[0].get("text")
    return text if isinstance(text, str) else None


def _prediction_image(body: Any) -> Optional[str]:
    if not isinstance(body, dict):
        return None
    predictions = body.get("predictions") or []
    if not predictions:
        return None
    encoded = predictions[0].get("bytesBase64Encoded")
    if not encoded:
        return None
    mime_type = predictions[0].get("mimeType") or "image/png"
    return f"data:{mime_type};base64,{encoded}"


def _decode_plan(text: str) -> list[RawPlanEntry]:
    blob = _extract_json_blob(text)
    try:
        days = _PLAN_ADAPTER.validate_json(blob)
    except ValidationError as exc:
        raise TransientFetchFailure(
            f"plan failed validation ({exc.error_count()} error(s))", raw=blob
        ) from exc
    if len(days) != len(DAYS):
        raise TransientFetchFailure(f"expected {len(DAYS)} days, received {len(days)}", raw=blob)
    entries = [
        RawPlanEntry(day=entry.day.strip().capitalize(), title=entry.meals.dinner.strip())
        for entry in days
    ]
    if sorted(entry.day for entry in entries) != sorted(DAYS):
        raise TransientFetchFailure("plan days missing or repeated", raw=blob)
    return entries


def _decode_details(text: str, *, require_new_title: bool = False) -> DetailRecord:
    blob = _extract_json_blob(text)
    try:
        record = DetailRecord.model_validate_json(blob)
    except ValidationError as exc:
        raise TransientFetchFailure(
            f"recipe details failed validation ({exc.error_count()} error(s))", raw=blob
        ) from exc
    if require_new_title and not (record.new_title or "").strip():
        raise TransientFetchFailure("missing expected field newMealName", raw=blob)
    return record


def _decode_title(text: str) -> str:
    title = text.strip().strip('"').strip()
    if not title:
        raise TransientFetchFailure("empty dinner title", raw=text)
    return title


class GeminiClient:
    """Call the Gemini ``generateContent`` and Imagen ``predict`` endpoints.

    Text requests are retried with ``text_policy``. :meth:`fetch_dish_image` makes a
    single attempt; callers wrap it in their own retry policy.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str,
        text_model: str,
        image_model: str,
        timeout: float = 60.0,
        text_policy: RetryPolicy = RetryPolicy(),
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._text_model = text_model
        self._image_model = image_model
        self._timeout = timeout
        self._text_policy = text_policy
        self._transport = transport
        self._sleep = sleep

    @property
    def _text_endpoint(self) -> str:
        return f"{self._base_url}/models/{self._text_model}:generateContent"

    @property
    def _image_endpoint(self) -> str:
        return f"{self._base_url}/models/{self._image_model}:predict"

    async def generate_plan(self, prefs: PlanPreferences) -> list[RawPlanEntry]:
        prompt = prompts.PLAN_PROMPT.format(
            preferences=prompts.render_preferences(prefs),
            facilities=prompts.render_facilities(prefs),
        )
        return await self._generate(
            prompt,
            {"responseMimeType": "application/json", "responseSchema": prompts.PLAN_RESPONSE_SCHEMA},
            decode=_decode_plan,
            description="meal plan",
        )

    async def regenerate_dinner(self, day: str, servings: int, prefs: PlanPreferences) -> str:
        prompt = prompts.REGENERATE_PROMPT.format(
            day=day,
            servings=servings,
            preferences=prompts.render_preferences(prefs),
            facilities=prompts.render_facilities(prefs, single=True),
        )
        return await self._generate(
            prompt,
            {"responseMimeType": "text/plain"},
            decode=_decode_title,
            description=f"dinner for {day}",
        )

    async def fetch_details(self, title: str, servings: int) -> DetailRecord:
        prompt = prompts.DETAILS_PROMPT.format(title=title, servings=servings)
        return await self._generate(
            prompt,
            {
                "responseMimeType": "application/json",
                "responseSchema": prompts.DETAILS_RESPONSE_SCHEMA,
            },
            decode=_decode_details,
            description=f"recipe for {title}",
        )

    async def customize_details(
        self, title: str, servings: int, substitutions: str
    ) -> DetailRecord:
        changes = substitutions.strip()
        prompt = prompts.CUSTOMIZE_PROMPT.format(
            title=title,
            servings=servings,
            changes=f" with the following changes: {changes}" if changes else "",
        )
        return await self._generate(
            prompt,
            {
                "responseMimeType": "application/json",
                "responseSchema": prompts.CUSTOMIZE_RESPONSE_SCHEMA,
            },
            decode=lambda text: _decode_details(text, require_new_title=True),
            description=f"customized recipe for {title}",
        )

    async def generate_shopping_list(
        self, slots: Sequence[Slot], prefs: PlanPreferences
    ) -> str:
        prompt = prompts.SHOPPING_LIST_PROMPT.format(
            dinners=prompts.render_dinners(slots),
            preferences=prompts.render_preferences(prefs),
        )
        return await self._generate(
            prompt,
            {"responseMimeType": "text/plain"},
            decode=lambda text: text,
            description="shopping list",
        )

    async def fetch_dish_image(self, title: str) -> str:
        payload = {
            "instances": [{"prompt": prompts.IMAGE_PROMPT.format(title=title)}],
            "parameters": {"sampleCount": 1},
        }
        body = await self._post_json(self._image_endpoint, payload)
        image = _prediction_image(body)
        if image is None:
            raise TransientFetchFailure(
                "missing expected field predictions[0].bytesBase64Encoded",
                raw=json.dumps(body)[:1000],
            )
        return image

    async def _generate(
        self,
        prompt: str,
        generation_config: dict[str, object],
        *,
        decode: Callable[[str], T],
        description: str,
    ) -> T:
        payload = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }

        async def _operation() -> T:
            body = await self._post_json(self._text_endpoint, payload)
            text = _candidate_text(body)
            if text is None:
                raise TransientFetchFailure(
                    "missing expected field candidates[0].content.parts[0].text",
                    raw=json.dumps(body)[:1000],
                )
            return decode(text)

        logger.debug("Requesting %s from %s", description, self._text_model)
        return await attempt(
            _operation,
            self._text_policy,
            description=description,
            sleep=self._sleep,
        )

    async def _post_json(self, endpoint: str, payload: dict[str, object]) -> Any:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(endpoint, params={"key": self._api_key}, json=payload)
        if response.is_error:
            raise TransientFetchFailure(f"HTTP status {response.status_code}", raw=response.text)
        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise TransientFetchFailure(
                f"invalid JSON response: {exc}", raw=response.text
            ) from exc


def build_gemini_client(settings: Optional[Settings] = None) -> GeminiClient | None:
    """Create a backend client when an API key is configured."""

    settings = settings or get_settings()
    if not settings.gemini_api_key:
        logger.debug("No Gemini API key configured; generation backend disabled.")
        return None

    return GeminiClient(
        api_key=settings.gemini_api_key,
        base_url=settings.gemini_base_url,
        text_model=settings.text_model,
        image_model=settings.image_model,
        timeout=settings.request_timeout,
        text_policy=RetryPolicy(
            max_attempts=settings.text_retry_attempts,
            delay=settings.text_retry_delay,
        ),
    )


__all__ = ["GeminiClient", "build_gemini_client"]
