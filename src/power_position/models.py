"""Shared data models for the power position service."""

from dataclasses import dataclass, field
from datetime import date


@dataclass(frozen=True)
class Period:
    """Volume traded in one period of a trading day (index starts at 1)."""

    index: int
    volume: float


@dataclass(frozen=True)
class Trade:
    """A trade for one trading day with its ordered periods."""

    trade_date: date
    periods: tuple[Period, ...] = field(default_factory=tuple)

    @classmethod
    def from_volumes(cls, trade_date: date, volumes: list[float]) -> "Trade":
        """Build a trade whose periods are numbered from 1 in list order."""
        return cls(
            trade_date=trade_date,
            periods=tuple(
                Period(index=i, volume=float(v)) for i, v in enumerate(volumes, 1)
            ),
        )


@dataclass(frozen=True)
class ErrorInfo:
    """Failure recorded in an error report.

    ``attempts`` and ``max_attempts`` describe how much of the retry budget
    was used; ``abandoned`` is set when shutdown ended the retries early.
    """

    category: str
    message: str
    attempts: int | None = None
    max_attempts: int | None = None
    abandoned: bool = False

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        attempts: int | None = None,
        max_attempts: int | None = None,
        abandoned: bool = False,
    ) -> "ErrorInfo":
        return cls(
            category=type(exc).__name__,
            message=str(exc),
            attempts=attempts,
            max_attempts=max_attempts,
            abandoned=abandoned,
        )
