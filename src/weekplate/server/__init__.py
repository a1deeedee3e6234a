"""ASGI application factory and dependencies for the Weekplate server."""

from weekplate.server.app import app, create_app

__all__ = ["app", "create_app"]
