"""CSV rendering and file naming for power position reports.

Normal report::

    Local Time,Volume
    23:00,150.0
    00:00,275.0

Error report: four ``#`` comment lines describing the failure, then the same
table with every value replaced by ``ERROR``.
"""

from collections.abc import Mapping
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from power_position.models import ErrorInfo
from power_position.reporting.aggregator import ERROR_PLACEHOLDER

HEADER = "Local Time,Volume"
LINE_TERMINATOR = "\n"
FILE_PREFIX = "PowerPosition"
ERROR_SUFFIX = "_ERROR"
REPORT_GLOB = f"{FILE_PREFIX}_*.csv"

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_PLACEHOLDER_NOTE = "volumes below are placeholders."
_ONE_DECIMAL = Decimal("0.1")


def generate_file_name(extract_time: datetime, error: bool = False) -> str:
    """``PowerPosition_<yyyyMMdd>_<HHmm>.csv``, with ``_ERROR`` for fallbacks."""
    suffix = ERROR_SUFFIX if error else ""
    return f"{FILE_PREFIX}_{extract_time:%Y%m%d}_{extract_time:%H%M}{suffix}.csv"


def _format_value(value: float | str, error: bool) -> str:
    if error:
        return ERROR_PLACEHOLDER
    # midpoints round away from zero: -12.25 -> -12.3
    rounded = Decimal(repr(float(value))).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP)
    return format(rounded, "f")


def _error_banner(error: ErrorInfo) -> str:
    if error.attempts is None or error.max_attempts is None:
        return f"# Power position extraction failed; {_PLACEHOLDER_NOTE}"
    if error.abandoned:
        return (
            "# Power position extraction abandoned at shutdown after "
            f"{error.attempts} of {error.max_attempts} attempts; {_PLACEHOLDER_NOTE}"
        )
    return (
        "# Power position extraction failed after all "
        f"{error.attempts} attempts; {_PLACEHOLDER_NOTE}"
    )


def render_csv(
    volumes: Mapping[str, float | str],
    extract_time: datetime,
    error: ErrorInfo | None = None,
    generated_at: datetime | None = None,
) -> str:
    """Render report text, keeping the mapping's bucket order."""
    lines: list[str] = []
    if error is not None:
        generated_at = generated_at or datetime.now(extract_time.tzinfo)
        lines.extend([
            _error_banner(error),
            f"# ERROR: {error.category}: {error.message}",
            f"# Extract Time: {extract_time.strftime(_TIMESTAMP_FORMAT)}",
            f"# Generated: {generated_at.strftime(_TIMESTAMP_FORMAT)}",
        ])

    lines.append(HEADER)
    for label, value in volumes.items():
        lines.append(f"{label},{_format_value(value, error is not None)}")

    return LINE_TERMINATOR.join(lines)


def serialize(
    volumes: Mapping[str, float | str],
    extract_time: datetime,
    error: ErrorInfo | None = None,
    generated_at: datetime | None = None,
) -> tuple[str, str]:
    """Render a report and derive its file name.

    Args:
        volumes: Bucket mapping from the aggregator (or a placeholder mapping).
        extract_time: Logical extraction time in the trading zone.
        error: When given, produces the error variant of the report.
        generated_at: Wall-clock generation time for the error header.

    Returns:
        Tuple of (csv_text, file_name).
    """
    content = render_csv(volumes, extract_time, error, generated_at)
    return content, generate_file_name(extract_time, error=error is not None)
