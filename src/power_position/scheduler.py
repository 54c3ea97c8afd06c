"""Scheduler running the extraction and retention loops side by side.

The two loops share only the stop signal. The last-cleanup timestamp is read
and written by the cleanup loop alone. Every wait is a cancellable wait on
the stop signal, so stop() returns within one tick; an extraction cycle that
is already writing is allowed to finish.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import timedelta
from typing import TYPE_CHECKING

from power_position.cancellation import wait_or_stop
from power_position.config import CleanupSettings, ExtractSettings
from power_position.logging import get_logger

if TYPE_CHECKING:
    from power_position.monitoring.base import MetricsRecorder
    from power_position.retention import RetentionCleaner
    from power_position.worker import ExtractionWorker

logger = get_logger(__name__)


class Scheduler:
    """Owns the extraction loop and the cleanup loop.

    Args:
        worker: Runs extraction cycles.
        cleaner: Deletes expired reports.
        metrics: Flushed once on stop.
        extract_settings: Extraction interval.
        cleanup_settings: Retention policy and cleanup cadence.
        clock: Monotonic clock for the cleanup cadence.
    """

    def __init__(
        self,
        worker: ExtractionWorker,
        cleaner: RetentionCleaner,
        metrics: MetricsRecorder,
        extract_settings: ExtractSettings,
        cleanup_settings: CleanupSettings,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._worker = worker
        self._cleaner = cleaner
        self._metrics = metrics
        self._extract = extract_settings
        self._cleanup = cleanup_settings
        self._clock = clock
        self._stop_event = asyncio.Event()
        self._tasks: list[asyncio.Task] = []  # type: ignore[type-arg]
        self._last_cleanup: float | None = None

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def last_cleanup(self) -> float | None:
        return self._last_cleanup

    async def start(self) -> None:
        """Start both loops; the first extraction runs immediately."""
        if self._tasks:
            logger.warning("scheduler_already_running")
            return
        self._stop_event.clear()
        self._tasks = [
            asyncio.create_task(self._extract_loop(), name="extract-loop"),
            asyncio.create_task(self._cleanup_loop(), name="cleanup-loop"),
        ]
        logger.info(
            "scheduler_started",
            interval_minutes=self._extract.interval_minutes,
            cleanup_enabled=self._cleanup.enabled,
            cleanup_interval_hours=self._cleanup.interval_hours,
        )

    async def stop(self) -> None:
        """Signal both loops, wait for them to finish, flush metrics."""
        if not self._tasks:
            return
        logger.info("scheduler_stopping")
        self._stop_event.set()
        results = await asyncio.gather(*self._tasks, return_exceptions=True)
        for task, result in zip(self._tasks, results):
            if isinstance(result, BaseException) and not isinstance(
                result, asyncio.CancelledError
            ):
                logger.error("scheduler_loop_crashed", loop=task.get_name(), error=str(result))
        self._tasks = []
        self._metrics.log_summary()
        logger.info("scheduler_stopped")

    async def _extract_loop(self) -> None:
        # fixed rate: cycle k starts at start + k * interval, whatever the cycle length
        interval = self._extract.interval_minutes * 60
        loop = asyncio.get_running_loop()
        next_run = loop.time()
        while not self._stop_event.is_set():
            await self.run_extract()
            next_run += interval
            now = loop.time()
            if next_run < now:
                missed = int((now - next_run) // interval) + 1
                next_run += missed * interval
                logger.warning("extraction_ticks_skipped", missed=missed)
            if await wait_or_stop(self._stop_event, next_run - now):
                break

    async def _cleanup_loop(self) -> None:
        interval = self._cleanup.check_interval_minutes * 60
        while not await wait_or_stop(self._stop_event, interval):
            await self.run_cleanup_if_due()

    async def run_extract(self) -> int | None:
        """Run one extraction cycle; failures are logged, never raised.

        Returns:
            Trade count, or None if the cycle failed.
        """
        try:
            count = await self._worker.generate_report(stop_event=self._stop_event)
        except Exception as exc:
            logger.error("extraction_cycle_failed", error=str(exc), exc_info=True)
            return None
        logger.info("extraction_cycle_complete", trades=count)
        return count

    async def run_cleanup_if_due(self) -> bool:
        """Run retention cleanup when enabled and the interval has elapsed.

        Returns:
            True if a cleanup pass completed.
        """
        if not self._cleanup.enabled:
            return False

        now = self._clock()
        interval = self._cleanup.interval_hours * 3600
        if self._last_cleanup is not None and now - self._last_cleanup < interval:
            return False

        retention = timedelta(days=self._cleanup.retention_days)
        try:
            deleted = await asyncio.to_thread(self._cleaner.cleanup, retention)
        except Exception as exc:
            logger.error("file_cleanup_failed", error=str(exc), exc_info=True)
            return False

        self._last_cleanup = self._clock()
        logger.info("file_cleanup_complete", deleted=deleted)
        return True
