"""JSON endpoints exposing health and run metrics."""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

router = APIRouter()


@router.get("/health")
async def get_health(request: Request) -> JSONResponse:
    """Last successful run and whether it is recent enough."""
    snapshot = request.app.state.health_monitor.snapshot()
    return JSONResponse(snapshot, status_code=200 if snapshot["healthy"] else 503)


@router.get("/metrics")
async def get_metrics(request: Request) -> JSONResponse:
    """Run counters since process start."""
    return JSONResponse(request.app.state.metrics.snapshot())
