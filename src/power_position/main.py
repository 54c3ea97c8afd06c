"""Entry point for the power position service.

Wires all components together and runs the scheduler until SIGINT/SIGTERM.
When the status endpoint is enabled, the scheduler runs inside the FastAPI
lifespan and uvicorn owns signal handling.

Component wiring order (in build_components):
1. ServiceMetrics (run counters)
2. HealthMonitor (staleness and disk-space polling)
3. SimulatedTradeProvider (upstream trade source)
4. ExtractionWorker (retry, aggregate, write)
5. RetentionCleaner (expired report deletion)
6. Scheduler (extraction and cleanup loops)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from power_position.config import AppSettings
from power_position.logging import get_logger, setup_logging
from power_position.monitoring.health import HealthMonitor
from power_position.monitoring.metrics import ServiceMetrics
from power_position.provider.client import TradeProvider
from power_position.provider.simulated import SimulatedTradeProvider
from power_position.retention import RetentionCleaner
from power_position.scheduler import Scheduler
from power_position.worker import ExtractionWorker


def build_components(
    settings: AppSettings, provider: TradeProvider | None = None
) -> dict[str, Any]:
    """Build the component graph from settings.

    Args:
        settings: Application-wide settings.
        provider: Trade source; defaults to the simulated provider.

    Returns:
        Dict mapping component names to instances.
    """
    metrics = ServiceMetrics(detailed_logging=settings.detailed_logging)
    health_monitor = HealthMonitor(settings.extract, settings.health)
    provider = provider or SimulatedTradeProvider(settings.provider)
    worker = ExtractionWorker(
        provider=provider,
        health=health_monitor,
        metrics=metrics,
        settings=settings.extract,
    )
    cleaner = RetentionCleaner(settings.extract.output_directory)
    scheduler = Scheduler(
        worker=worker,
        cleaner=cleaner,
        metrics=metrics,
        extract_settings=settings.extract,
        cleanup_settings=settings.cleanup,
    )
    return {
        "metrics": metrics,
        "health_monitor": health_monitor,
        "provider": provider,
        "worker": worker,
        "cleaner": cleaner,
        "scheduler": scheduler,
    }


async def _start_services(settings: AppSettings, components: dict[str, Any]) -> None:
    if settings.health.enabled:
        await components["health_monitor"].start()
    await components["scheduler"].start()


async def _stop_services(settings: AppSettings, components: dict[str, Any]) -> None:
    await components["scheduler"].stop()
    if settings.health.enabled:
        await components["health_monitor"].stop()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the scheduler and health monitor for the lifetime of the server."""
    logger = get_logger("power_position.main")
    settings = app.state.settings
    components = app.state.components

    app.state.health_monitor = components["health_monitor"]
    app.state.metrics = components["metrics"]

    await _start_services(settings, components)
    logger.info("lifespan_started")

    yield

    await _stop_services(settings, components)
    logger.info("power_position_stopped")


async def run() -> None:
    """Run the power position service."""
    settings = AppSettings()
    setup_logging(settings.log_level, settings.log_file)
    logger = get_logger("power_position.main")

    components = build_components(settings)

    if settings.run_once:
        logger.info("running_once", output_directory=settings.extract.output_directory)
        await components["scheduler"].run_extract()
        components["metrics"].log_summary()
        return

    if settings.status.enabled:
        from power_position.status.app import create_status_app

        app = create_status_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info(
            "starting_with_status_endpoint",
            host=settings.status.host,
            port=settings.status.port,
        )
        config = uvicorn.Config(
            app,
            host=settings.status.host,
            port=settings.status.port,
            log_level="warning",
        )
        await uvicorn.Server(config).serve()
        return

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    logger.info(
        "starting_without_status_endpoint",
        output_directory=settings.extract.output_directory,
        interval_minutes=settings.extract.interval_minutes,
    )
    await _start_services(settings, components)
    try:
        await shutdown.wait()
        logger.info("graceful_shutdown_signal")
    finally:
        await _stop_services(settings, components)
        logger.info("power_position_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
