"""Aggregation of trade period volumes into hourly buckets.

Pure functions: no I/O and no state shared between calls.
"""

from collections.abc import Iterable

from power_position.logging import get_logger
from power_position.models import Trade
from power_position.reporting.trading_day import (
    UNKNOWN_BUCKET,
    bucket_label,
    canonical_labels,
    sort_key,
)

logger = get_logger(__name__)

ERROR_PLACEHOLDER = "ERROR"


def aggregate(trades: Iterable[Trade]) -> dict[str, float]:
    """Sum volumes per bucket across all trades.

    Returns:
        Mapping ordered 23:00, 00:00, ..., 22:00. Empty input yields ``{}``.
    """
    totals: dict[str, float] = {}
    for trade in trades:
        for period in trade.periods:
            label = bucket_label(period.index)
            if label == UNKNOWN_BUCKET:
                logger.warning(
                    "period_index_out_of_range",
                    trade_date=trade.trade_date.isoformat(),
                    period=period.index,
                )
            totals[label] = totals.get(label, 0.0) + period.volume

    return {label: totals[label] for label in sorted(totals, key=sort_key)}


def empty_volumes() -> dict[str, float]:
    """All canonical buckets at zero volume."""
    return {label: 0.0 for label in canonical_labels()}


def error_volumes() -> dict[str, str]:
    """All canonical buckets carrying the error placeholder."""
    return {label: ERROR_PLACEHOLDER for label in canonical_labels()}
