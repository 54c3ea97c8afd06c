"""In-memory run counters with structured summary logging.

Counters are mutated only from the event loop, so no locking is needed.
"""

import time
from collections.abc import Callable

from power_position.logging import get_logger
from power_position.monitoring.base import MetricsRecorder

logger = get_logger(__name__)


class ServiceMetrics(MetricsRecorder):
    """Counts successful and failed extraction cycles and processed trades.

    Args:
        detailed_logging: Log the running totals after every successful run.
        clock: Monotonic clock used for uptime.
    """

    def __init__(
        self,
        detailed_logging: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._detailed_logging = detailed_logging
        self._clock = clock
        self._started_at = clock()
        self._successful_runs = 0
        self._failed_runs = 0
        self._total_trades = 0

    @property
    def successful_runs(self) -> int:
        return self._successful_runs

    @property
    def failed_runs(self) -> int:
        return self._failed_runs

    @property
    def total_trades(self) -> int:
        return self._total_trades

    @property
    def success_rate(self) -> float:
        """Fraction of successful runs; 1.0 before any run completes."""
        total = self._successful_runs + self._failed_runs
        if total == 0:
            return 1.0
        return self._successful_runs / total

    @property
    def uptime_seconds(self) -> float:
        return self._clock() - self._started_at

    def record_successful_run(self, trade_count: int = 0) -> None:
        self._successful_runs += 1
        self._total_trades += trade_count
        if self._detailed_logging:
            logger.info(
                "metrics_run_recorded",
                successful_runs=self._successful_runs,
                total_trades=self._total_trades,
            )

    def record_failed_run(self) -> None:
        self._failed_runs += 1
        logger.warning(
            "metrics_run_failed",
            failed_runs=self._failed_runs,
            success_rate=round(self.success_rate * 100, 2),
        )

    def log_summary(self) -> None:
        logger.info("metrics_summary", **self.snapshot())

    def snapshot(self) -> dict:
        """Current counters as a plain dict (success rate in percent)."""
        return {
            "uptime_seconds": round(self.uptime_seconds, 1),
            "successful_runs": self._successful_runs,
            "failed_runs": self._failed_runs,
            "success_rate": round(self.success_rate * 100, 2),
            "total_trades": self._total_trades,
        }
