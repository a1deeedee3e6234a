"""Run the Weekplate API with uvicorn."""

from __future__ import annotations

import asyncio
import os
from typing import Optional

import uvicorn

APP_FACTORY = "weekplate.server.app:create_app"


def _parse_duration(value: Optional[str]) -> Optional[float]:
    if not value:
        return None
    try:
        parsed = float(value)
    except ValueError as exc:
        raise SystemExit(f"Invalid WEEKPLATE_SERVER_DURATION '{value}': {exc}") from exc
    if parsed <= 0:
        raise SystemExit("WEEKPLATE_SERVER_DURATION must be greater than 0 when provided.")
    return parsed


async def _serve_for(server: uvicorn.Server, duration: float) -> None:
    """Serve until ``duration`` seconds have elapsed, then request shutdown."""

    async def _stop_later() -> None:
        await asyncio.sleep(duration)
        server.should_exit = True

    stopper = asyncio.create_task(_stop_later())
    try:
        await server.serve()
    finally:
        stopper.cancel()


def build_config() -> uvicorn.Config:
    host = os.environ.get("WEEKPLATE_SERVER_HOST", "127.0.0.1")
    port = int(os.environ.get("WEEKPLATE_SERVER_PORT", "8000"))
    reload_enabled = os.environ.get("RELOAD") == "1"
    # The app factory installs its own handlers; keep uvicorn from replacing them.
    return uvicorn.Config(
        APP_FACTORY,
        host=host,
        port=port,
        factory=True,
        reload=reload_enabled,
        log_config=None,
    )


def main() -> None:
    """Entry point used by `python -m weekplate.server.run`."""

    config = build_config()
    duration = _parse_duration(os.environ.get("WEEKPLATE_SERVER_DURATION"))

    if config.reload:
        if duration is not None:
            raise SystemExit("Use RELOAD=0 when specifying WEEKPLATE_SERVER_DURATION.")
        uvicorn.run(
            APP_FACTORY,
            host=config.host,
            port=config.port,
            factory=True,
            reload=True,
            log_config=None,
        )
        return

    server = uvicorn.Server(config)
    if duration is not None:
        asyncio.run(_serve_for(server, duration))
        return
    server.run()


if __name__ == "__main__":
    main()
