"""FastAPI status application factory."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI

from power_position import __version__
from power_position.status import routes


def create_status_app(lifespan: Any = None) -> FastAPI:
    """Create the status application.

    Args:
        lifespan: Optional async context manager; main.py uses it to run the
                  scheduler and health monitor for the lifetime of the server.

    Returns:
        FastAPI application serving ``/health`` and ``/metrics``. Route
        handlers read ``health_monitor`` and ``metrics`` from ``app.state``.
    """
    app = FastAPI(
        title="Power Position Service",
        version=__version__,
        lifespan=lifespan,
    )
    app.include_router(routes.router)
    return app
