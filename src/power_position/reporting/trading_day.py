"""Trading-day and hourly bucket computation.

A trading day runs from 23:00 local time on the previous calendar day to
23:00 on the trading date. Period 1 therefore covers 23:00, period 2 covers
00:00, and so on up to period 24 at 22:00.

All times are in the trading region's zone, never the host's.
"""

from datetime import date, datetime, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from power_position.logging import get_logger

logger = get_logger(__name__)

CANONICAL_PERIODS = 24
ROLLOVER_HOUR = 23
UNKNOWN_BUCKET = "??:00"


def resolve_timezone(name: str) -> tzinfo:
    """Return the trading zone for ``name``, falling back to UTC."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("timezone_not_found", timezone=name, fallback="UTC")
        return timezone.utc


def trade_date(now: datetime) -> date:
    """Trading date that is in progress at local time ``now``."""
    if now.hour >= ROLLOVER_HOUR:
        return now.date() + timedelta(days=1)
    return now.date()


def bucket_label(period_index: int) -> str:
    """Map a period index to its ``HH:00`` bucket.

    Indices outside 1..24 have no hour in a canonical trading day and map to
    ``UNKNOWN_BUCKET``.
    """
    if period_index < 1 or period_index > CANONICAL_PERIODS:
        return UNKNOWN_BUCKET
    if period_index == 1:
        return f"{ROLLOVER_HOUR:02d}:00"
    return f"{period_index - 2:02d}:00"


def sort_key(label: str) -> int:
    """Ordering key placing 23:00 first and the unknown bucket last."""
    if label == UNKNOWN_BUCKET:
        return CANONICAL_PERIODS
    hour = int(label.split(":", 1)[0])
    return -1 if hour == ROLLOVER_HOUR else hour


def canonical_labels() -> list[str]:
    """The 24 bucket labels of a canonical trading day, in report order."""
    return [bucket_label(i) for i in range(1, CANONICAL_PERIODS + 1)]
