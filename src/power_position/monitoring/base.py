"""Capability interfaces the extraction worker reports run outcomes to."""

from abc import ABC, abstractmethod


class HealthReporter(ABC):
    """Receives a signal after every successful extraction cycle."""

    @abstractmethod
    def record_successful_run(self) -> None:
        ...


class MetricsRecorder(ABC):
    """Aggregates run counters for the lifetime of the process."""

    @abstractmethod
    def record_successful_run(self, trade_count: int = 0) -> None:
        ...

    @abstractmethod
    def record_failed_run(self) -> None:
        ...

    @abstractmethod
    def log_summary(self) -> None:
        ...
