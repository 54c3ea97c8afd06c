"""Extraction worker: fetch trades with bounded retry, aggregate, write report.

Each cycle is a small state machine::

    Attempting(n) --success--> Done(trade_count)
    Attempting(n) --failure, n < retry_count--> Backoff(n) --> Attempting(n + 1)
    Attempting(n) --failure, n == retry_count--> ExhaustedFallback

Every provider failure is retried, whatever its type. The backoff doubles from
``retry_delay_ms`` and is cut short by the stop signal, in which case the cycle
goes straight to the fallback report.

The only failure that leaves a cycle is a ReportWriteError for a normal
report; everything else resolves to a success count or a written error report.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from power_position.cancellation import wait_or_stop
from power_position.config import ExtractSettings
from power_position.exceptions import ReportWriteError
from power_position.logging import get_logger
from power_position.models import ErrorInfo, Trade
from power_position.reporting import (
    aggregate,
    empty_volumes,
    error_volumes,
    resolve_timezone,
    serialize,
    trade_date,
)

if TYPE_CHECKING:
    from power_position.monitoring.base import HealthReporter, MetricsRecorder
    from power_position.provider.client import TradeProvider

logger = get_logger(__name__)


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as fh:
        fh.write(content)


class ExtractionWorker:
    """Runs one extraction cycle per call to generate_report().

    Args:
        provider: Upstream trade source.
        health: Receives a signal on every successful cycle.
        metrics: Receives success and failure counts.
        settings: Output directory, retry budget and trading zone.
        clock: Returns the current time in the trading zone; defaults to
            ``datetime.now`` in the configured zone.
    """

    def __init__(
        self,
        provider: TradeProvider,
        health: HealthReporter,
        metrics: MetricsRecorder,
        settings: ExtractSettings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._provider = provider
        self._health = health
        self._metrics = metrics
        self._settings = settings
        self._zone = resolve_timezone(settings.timezone)
        self._clock = clock or (lambda: datetime.now(self._zone))

    @property
    def output_directory(self) -> Path:
        return Path(self._settings.output_directory)

    async def generate_report(self, stop_event: asyncio.Event | None = None) -> int:
        """Run one extraction cycle.

        Args:
            stop_event: Shared stop signal; interrupts backoff waits.

        Returns:
            Number of trades processed, or 0 when the fallback report was written.

        Raises:
            ReportWriteError: If the normal report could not be written.
        """
        extract_time = self._clock()
        target_date = trade_date(extract_time)
        max_attempts = self._settings.retry_count + 1
        last_error: Exception | None = None
        attempts_made = 0
        abandoned = False

        logger.info(
            "extraction_started",
            trade_date=target_date.isoformat(),
            extract_time=extract_time.isoformat(),
        )

        for attempt in range(max_attempts):
            try:
                attempts_made += 1
                trades = await self._provider.get_trades(target_date)
            except Exception as exc:
                last_error = exc
                logger.warning(
                    "trade_fetch_failed",
                    attempt=attempt + 1,
                    max_attempts=max_attempts,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                if attempt == max_attempts - 1:
                    break

                delay = self._settings.retry_delay_ms * (2**attempt) / 1000
                logger.info("trade_fetch_backoff", attempt=attempt + 1, delay_seconds=delay)
                if await wait_or_stop(stop_event, delay):
                    logger.info("trade_fetch_retries_abandoned", reason="shutdown")
                    abandoned = True
                    break
                continue

            return await self._write_normal_report(trades, extract_time)

        assert last_error is not None
        error = ErrorInfo.from_exception(
            last_error,
            attempts=attempts_made,
            max_attempts=max_attempts,
            abandoned=abandoned,
        )
        await self._write_error_report(error, extract_time)
        return 0

    async def _write_normal_report(self, trades: list[Trade], extract_time: datetime) -> int:
        volumes = aggregate(trades) if trades else empty_volumes()
        content, file_name = serialize(volumes, extract_time)
        path = self.output_directory / file_name

        try:
            await asyncio.to_thread(_write_text, path, content)
        except OSError as exc:
            logger.error("report_write_failed", path=str(path), error=str(exc))
            self._metrics.record_failed_run()
            raise ReportWriteError(f"Could not write report {path}: {exc}") from exc

        self._health.record_successful_run()
        self._metrics.record_successful_run(len(trades))
        logger.info(
            "report_written",
            path=str(path),
            trades=len(trades),
            buckets=len(volumes),
        )
        return len(trades)

    async def _write_error_report(self, error: ErrorInfo, extract_time: datetime) -> None:
        content, file_name = serialize(
            error_volumes(),
            extract_time,
            error=error,
            generated_at=datetime.now(self._zone),
        )
        path = self.output_directory / file_name

        try:
            await asyncio.to_thread(_write_text, path, content)
            logger.error(
                "extraction_failed_error_report_written",
                path=str(path),
                error_type=error.category,
                error=error.message,
                attempts=error.attempts,
                abandoned=error.abandoned,
            )
        except OSError as exc:
            logger.error(
                "error_report_write_failed",
                path=str(path),
                error=str(exc),
                original_error=error.message,
            )
        finally:
            self._metrics.record_failed_run()
