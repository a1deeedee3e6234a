"""ASGI application for Weekplate."""

from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Optional
from uuid import uuid4

from fastapi import BackgroundTasks, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from weekplate import __version__, metrics
from weekplate.codec.plan_text import PlanImportError
from weekplate.config import Settings, get_settings
from weekplate.fetch.retry import ExhaustedRetries
from weekplate.logging_utils import configure_logging as configure_app_logging
from weekplate.models.recipe import DetailRecord, InvalidRequestError, PlanPreferences
from weekplate.models.results import OperationResult
from weekplate.models.schedule import Slot, UnknownDayError
from weekplate.parsing.shopping_list import parse_shopping_list, render_shopping_list
from weekplate.planner.session import BackendUnavailableError, PlannerSession, build_session
from weekplate.server import deps

logger = logging.getLogger(__name__)


class PlanView(BaseModel):
    generation: int
    slots: list[Slot]
    details: dict[str, OperationResult[DetailRecord]] = Field(default_factory=dict)


class PlanImportRequest(BaseModel):
    text: str = Field(..., max_length=20_000)


class SlotUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, max_length=500)
    servings: Optional[int] = None


class CustomizeRequest(BaseModel):
    servings: int
    substitutions: str = Field(default="", max_length=1000)


class ShoppingListParseRequest(BaseModel):
    text: str = Field(..., max_length=50_000)


class ShoppingListResponse(BaseModel):
    categories: dict[str, list[str]]
    markdown: str


def _plan_view(session: PlannerSession) -> PlanView:
    return PlanView(
        generation=session.store.generation,
        slots=list(session.schedule.slots),
        details=dict(session.details),
    )


def _day(label: str) -> str:
    return label.strip().capitalize()


def _error_response(request: Request, status_code: int, detail: str, **extra: Any) -> JSONResponse:
    log_kwargs: dict[str, Any] = {}
    request_id = getattr(request.state, "request_id", None)
    if request_id:
        log_kwargs["extra"] = {"request_id": request_id}
    logger.warning(
        "%s %s failed with %s: %s",
        request.method,
        request.url.path,
        status_code,
        detail,
        **log_kwargs,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail, **extra})


def _configure_logging(settings: Settings) -> None:
    secrets = [settings.api_token or "", settings.gemini_api_key or ""]
    configure_app_logging(settings.log_level, settings.log_format, secrets)


def create_app(session: Optional[PlannerSession] = None) -> FastAPI:
    """Create and configure a FastAPI application instance."""

    settings = get_settings()
    _configure_logging(settings)

    application = FastAPI(title="Weekplate Dinner Planner", version=__version__)
    application.state.session = session or build_session(settings)
    if application.state.session.backend is None:
        logger.warning("No generative backend configured; generation endpoints return 503")
    logger.debug("Application created with log level %s", settings.log_level)

    if settings.log_requests:
        access_logger = logging.getLogger("weekplate.access")

        @application.middleware("http")
        async def log_request_response(request: Request, call_next):
            """Log request/response details without leaking sensitive data."""

            request_id = request.headers.get("X-Request-ID") or uuid4().hex
            request.state.request_id = request_id
            start = perf_counter()
            path = request.url.path
            method = request.method
            try:
                response: Response = await call_next(request)
            except Exception:
                duration_ms = (perf_counter() - start) * 1000
                access_logger.exception(
                    "HTTP %s %s status=500 duration_ms=%.2f",
                    method,
                    path,
                    duration_ms,
                    extra={"request_id": request_id},
                )
                metrics.REQUEST_COUNT.labels(method=method, path=path, status="500").inc()
                metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(
                    duration_ms / 1000.0
                )
                raise

            duration_ms = (perf_counter() - start) * 1000
            response.headers.setdefault("X-Request-ID", request_id)
            access_logger.info(
                "HTTP %s %s status=%s duration_ms=%.2f",
                method,
                path,
                response.status_code,
                duration_ms,
                extra={"request_id": request_id},
            )
            metrics.REQUEST_COUNT.labels(
                method=method,
                path=path,
                status=str(response.status_code),
            ).inc()
            metrics.REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000.0)
            return response

    @application.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(error.get("loc", ())), "msg": str(error.get("msg", "")), "type": error.get("type")}
            for error in exc.errors()
        ]
        logger.warning("Validation error on %s %s: %s", request.method, request.url.path, errors)
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"detail": errors},
        )

    @application.exception_handler(InvalidRequestError)
    async def invalid_request_handler(request: Request, exc: InvalidRequestError):
        return _error_response(request, status.HTTP_400_BAD_REQUEST, str(exc))

    @application.exception_handler(PlanImportError)
    async def plan_import_handler(request: Request, exc: PlanImportError):
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            f"Import failed: {exc}",
            line=exc.line,
        )

    @application.exception_handler(UnknownDayError)
    async def unknown_day_handler(request: Request, exc: UnknownDayError):
        return _error_response(request, status.HTTP_404_NOT_FOUND, str(exc))

    @application.exception_handler(ExhaustedRetries)
    async def exhausted_retries_handler(request: Request, exc: ExhaustedRetries):
        return _error_response(request, status.HTTP_502_BAD_GATEWAY, str(exc))

    @application.exception_handler(BackendUnavailableError)
    async def backend_unavailable_handler(request: Request, exc: BackendUnavailableError):
        return _error_response(request, status.HTTP_503_SERVICE_UNAVAILABLE, str(exc))

    @application.get("/healthz", include_in_schema=False)
    def healthz(session: PlannerSession = Depends(deps.get_session)) -> dict[str, Any]:
        return {"status": "ok", "version": __version__, "backend": session.backend is not None}

    @application.get("/metrics", include_in_schema=False)
    def metrics_endpoint() -> Response:
        payload = generate_latest()
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    @application.get("/plan", response_model=PlanView, summary="Current weekly plan")
    def plan_show(session: PlannerSession = Depends(deps.get_session)) -> PlanView:
        return _plan_view(session)

    @application.post("/plan", response_model=PlanView, summary="Generate a weekly plan")
    async def plan_generate(
        prefs: PlanPreferences,
        background_tasks: BackgroundTasks,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> PlanView:
        """Replace the plan with seven generated dinners; images load in the background."""

        await session.generate(prefs, populate=False)
        background_tasks.add_task(session.populate_images)
        return _plan_view(session)

    @application.post("/plan/import", response_model=PlanView, summary="Import plan text")
    async def plan_import(
        payload: PlanImportRequest,
        background_tasks: BackgroundTasks,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> PlanView:
        await session.import_text(payload.text, populate=False)
        background_tasks.add_task(session.populate_images)
        return _plan_view(session)

    @application.get("/plan/export", response_class=PlainTextResponse, summary="Export plan text")
    def plan_export(session: PlannerSession = Depends(deps.get_session)) -> str:
        return session.export_text()

    @application.patch("/plan/{day}", response_model=Slot, summary="Edit one day")
    async def plan_update_day(
        day: str,
        payload: SlotUpdateRequest,
        background_tasks: BackgroundTasks,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> Slot:
        label = _day(day)
        slot = session.schedule.slot(label)
        if payload.servings is not None:
            slot = session.set_servings(label, payload.servings)
        if payload.title is not None:
            slot = await session.edit_title(label, payload.title, refresh=False)
            background_tasks.add_task(session.refresh_image, label)
        return slot

    @application.delete("/plan/{day}", response_model=Slot, summary="Clear one day")
    def plan_clear_day(
        day: str,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> Slot:
        return session.clear_day(_day(day))

    @application.post("/plan/{day}/regenerate", response_model=Slot, summary="Regenerate one day")
    async def plan_regenerate_day(
        day: str,
        background_tasks: BackgroundTasks,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> Slot:
        label = _day(day)
        slot = await session.regenerate_day(label, refresh=False)
        background_tasks.add_task(session.refresh_image, label)
        return slot

    @application.get(
        "/plan/{day}/details",
        response_model=DetailRecord,
        summary="Recipe details for one day",
    )
    async def plan_day_details(
        day: str,
        session: PlannerSession = Depends(deps.get_session),
    ) -> DetailRecord:
        return await session.load_details(_day(day))

    @application.post(
        "/plan/{day}/customize",
        response_model=DetailRecord,
        summary="Customize one day's recipe",
    )
    async def plan_customize_day(
        day: str,
        payload: CustomizeRequest,
        background_tasks: BackgroundTasks,
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> DetailRecord:
        label = _day(day)
        record = await session.customize(
            label, payload.servings, payload.substitutions, refresh=False
        )
        background_tasks.add_task(session.refresh_image, label)
        return record

    @application.post(
        "/shopping-list",
        response_model=ShoppingListResponse,
        summary="Generate a categorized shopping list",
    )
    async def shopping_list_generate(
        auth: None = Depends(deps.require_api_token),
        session: PlannerSession = Depends(deps.get_session),
    ) -> ShoppingListResponse:
        categories = await session.shopping_list()
        return ShoppingListResponse(
            categories=categories, markdown=render_shopping_list(categories)
        )

    @application.post(
        "/shopping-list/parse",
        response_model=ShoppingListResponse,
        summary="Categorize markdown shopping list text",
    )
    def shopping_list_parse(payload: ShoppingListParseRequest) -> ShoppingListResponse:
        categories = parse_shopping_list(payload.text)
        return ShoppingListResponse(
            categories=categories, markdown=render_shopping_list(categories)
        )

    return application


app = create_app()

__all__ = ["app", "create_app"]
