"""Health monitor: staleness of the last successful run and free disk space.

Polls on its own interval in the background. Polling problems are only ever
logged at debug level; the monitor never affects extraction.
"""

import asyncio
import shutil
import time
from collections.abc import Callable
from pathlib import Path

from power_position.config import ExtractSettings, HealthSettings
from power_position.logging import get_logger
from power_position.monitoring.base import HealthReporter

logger = get_logger(__name__)

_BYTES_PER_MB = 1024 * 1024


class HealthMonitor(HealthReporter):
    """Tracks the last successful run and warns when the service looks unhealthy.

    Args:
        extract_settings: Extraction interval and output directory.
        health_settings: Polling interval and disk-space threshold.
        clock: Wall clock (epoch seconds).
    """

    def __init__(
        self,
        extract_settings: ExtractSettings,
        health_settings: HealthSettings,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._extract = extract_settings
        self._settings = health_settings
        self._clock = clock
        self._last_successful_run: float | None = None
        self._started_at: float | None = None
        self._running = False
        self._task: asyncio.Task | None = None  # type: ignore[type-arg]

    @property
    def last_successful_run(self) -> float | None:
        return self._last_successful_run

    def record_successful_run(self) -> None:
        self._last_successful_run = self._clock()

    def seconds_since_last_run(self) -> float | None:
        if self._last_successful_run is None:
            return None
        return self._clock() - self._last_successful_run

    def is_stale(self) -> bool:
        """True when no run succeeded within twice the extraction interval.

        Before the first run the window is measured from start(); a monitor
        that was never started and never saw a run is stale.
        """
        reference = self._last_successful_run
        if reference is None:
            reference = self._started_at
        if reference is None:
            return True
        return self._clock() - reference > self._extract.interval_minutes * 60 * 2

    async def start(self) -> None:
        """Begin health polling in the background."""
        if self._running:
            logger.warning("health_monitor_already_running")
            return
        self._running = True
        self._started_at = self._clock()
        self._task = asyncio.create_task(self._poll_loop())
        logger.info(
            "health_monitor_started",
            check_interval_minutes=self._settings.check_interval_minutes,
        )

    async def stop(self) -> None:
        """Stop health polling."""
        self._running = False
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("health_monitor_stopped")

    async def _poll_loop(self) -> None:
        while self._running:
            self.check_health()
            await asyncio.sleep(self._settings.check_interval_minutes * 60)

    def check_health(self) -> bool:
        """Run one health check; returns True if no alert was raised."""
        healthy = True
        try:
            if self.is_stale():
                healthy = False
                elapsed = self.seconds_since_last_run()
                logger.warning(
                    "no_recent_successful_run",
                    minutes_since_last_run=None if elapsed is None else round(elapsed / 60, 1),
                )
            if not self._check_disk_space():
                healthy = False
        except Exception:
            logger.debug("health_check_error", exc_info=True)
        return healthy

    def _check_disk_space(self) -> bool:
        try:
            usage = shutil.disk_usage(_nearest_existing(Path(self._extract.output_directory)))
        except OSError:
            logger.debug("disk_space_check_failed", exc_info=True)
            return True

        threshold = self._settings.low_disk_space_threshold_mb * _BYTES_PER_MB
        if usage.free < threshold:
            logger.warning(
                "low_disk_space",
                available_mb=round(usage.free / _BYTES_PER_MB, 1),
                threshold_mb=self._settings.low_disk_space_threshold_mb,
                path=self._extract.output_directory,
            )
            return False
        return True

    def snapshot(self) -> dict:
        elapsed = self.seconds_since_last_run()
        return {
            "healthy": not self.is_stale(),
            "last_successful_run": self._last_successful_run,
            "seconds_since_last_run": None if elapsed is None else round(elapsed, 1),
        }


def _nearest_existing(path: Path) -> Path:
    path = path.resolve()
    while not path.exists() and path != path.parent:
        path = path.parent
    return path
