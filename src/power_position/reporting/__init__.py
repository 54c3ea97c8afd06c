"""Trading-day arithmetic, volume aggregation and CSV report rendering."""

from power_position.reporting.aggregator import aggregate, empty_volumes, error_volumes
from power_position.reporting.serializer import (
    REPORT_GLOB,
    generate_file_name,
    serialize,
)
from power_position.reporting.trading_day import (
    bucket_label,
    canonical_labels,
    resolve_timezone,
    sort_key,
    trade_date,
)

__all__ = [
    "REPORT_GLOB",
    "aggregate",
    "bucket_label",
    "canonical_labels",
    "empty_volumes",
    "error_volumes",
    "generate_file_name",
    "resolve_timezone",
    "serialize",
    "sort_key",
    "trade_date",
]
