"""
Date Normalizer

Turns the free-form date tail of an update message into an absolute,
timezone-aware instant. Parsing never fails: anything unrecognized logs a
warning and resolves to "now".

Supported forms (case-insensitive, trimmed):
- "now" / "just now"
- "today" (start of the local day) / "yesterday" (that minus 24h)
- "<n> <unit>[s] ago" with unit in second/minute/hour/day/week/month/year
- "<Month> <day> <year>", e.g. "Feb 14 2026" or "February 14 2026"
- anything pandas.to_datetime understands (ISO-8601 and friends)
"""

import re
from datetime import datetime, timedelta
from typing import Optional

import pandas as pd

from rankboard.utils import setup_logging

# --- Module Logger ---
logger = setup_logging(__name__)

RELATIVE_RE = re.compile(r"^(\d+)\s+(second|minute|hour|day|week|month|year)s?\s+ago$")
NATURAL_RE = re.compile(r"^([A-Za-z]+)\s+(\d{1,2})\s+(\d{4})$")

# Fixed-length units: no calendar arithmetic for months or years
UNIT_DELTAS = {
    "second": timedelta(seconds=1),
    "minute": timedelta(minutes=1),
    "hour": timedelta(hours=1),
    "day": timedelta(days=1),
    "week": timedelta(weeks=1),
    "month": timedelta(days=30),
    "year": timedelta(days=365),
}


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _parse_natural(text: str) -> Optional[datetime]:
    m = NATURAL_RE.match(text)
    if not m:
        return None
    month, day, year = m.groups()
    for fmt in ("%b %d %Y", "%B %d %Y"):
        try:
            return datetime.strptime(f"{month} {day} {year}", fmt).astimezone()
        except ValueError:
            continue
    return None


def _parse_standard(text: str) -> Optional[datetime]:
    try:
        ts = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if ts is None or pd.isna(ts):
        return None
    parsed = ts.to_pydatetime()
    # Naive timestamps are local wall-clock time
    return parsed if parsed.tzinfo is not None else parsed.astimezone()


def parse_date(raw: Optional[str], now: Optional[datetime] = None) -> datetime:
    """
    Parse a date expression into an absolute instant.

    Args:
        raw: Date text from the tail of an update message
        now: Reference instant (default: current local time)

    Returns:
        Timezone-aware datetime; "now" when the text is not understood
    """
    current = now or datetime.now().astimezone()
    if current.tzinfo is None:
        current = current.astimezone()

    if not raw or not isinstance(raw, str):
        return current

    text = raw.strip()
    lowered = text.lower()

    if lowered in ("now", "just now"):
        return current

    if lowered == "today":
        return _start_of_day(current)

    if lowered == "yesterday":
        return _start_of_day(current) - timedelta(hours=24)

    m = RELATIVE_RE.match(lowered)
    if m:
        count, unit = m.groups()
        try:
            return current - int(count) * UNIT_DELTAS[unit]
        except (OverflowError, ValueError):
            logger.warning(f"Relative date out of range: '{raw}' - using now")
            return current

    natural = _parse_natural(text)
    if natural is not None:
        return natural

    standard = _parse_standard(text)
    if standard is not None:
        return standard

    logger.warning(f"Could not parse date: '{raw}' - using now")
    return current
