"""Dependency definitions for the Weekplate API server."""

from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status

from weekplate.config import get_settings
from weekplate.planner.session import PlannerSession


def get_session(request: Request) -> PlannerSession:
    """Return the planning session owned by the running application."""

    return request.app.state.session


def require_api_token(
    request: Request,
    settings = Depends(get_settings),
) -> None:
    """Ensure requests carry the configured API token when required."""

    token = settings.api_token
    if not token:
        return

    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.split("Bearer ")[-1].strip() == token:
        return

    if request.headers.get("X-API-Key") == token:
        return

    if request.query_params.get("api_token") == token:
        return

    raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")
