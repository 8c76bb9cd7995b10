"""
Business rules for Desintesa.

These functions encode business logic and decision-making rules.
They are pure functions with no side effects.
"""

import math
from datetime import date, datetime, time, timezone
from typing import Any, Optional


FOLIO_PREFIX = "DES"


def utc_now() -> datetime:
    """Current time as timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_number(value: Any) -> float:
    """
    Coerce user input to a finite float.

    Empty, non-numeric and non-finite inputs become 0.0. Never raises.

    Examples:
        "12.5" -> 12.5
        "" -> 0.0
        "abc" -> 0.0
        float("inf") -> 0.0
    """
    if value is None:
        return 0.0
    if isinstance(value, str) and not value.strip():
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def is_supplied(value: Any) -> bool:
    """A field counts as supplied unless it is None or an empty string."""
    return value is not None and value != ""


def is_finite_number(value: Any) -> bool:
    """True for real int/float values that are finite (bools excluded)."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse a calendar date or timestamp into a naive datetime.

    Accepts date/datetime objects and ISO-8601 strings ("2025-03-01",
    "2025-03-01T10:30:00Z"). Aware values are normalised to naive UTC so
    mixed inputs stay comparable.

    Returns:
        datetime, or None if the value is empty or unparseable
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        try:
            return datetime.combine(date.fromisoformat(text), time())
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_calendar_date(value: Any) -> Optional[date]:
    """
    Parse a scheduling date as written by the author.

    Only plain calendar dates are accepted: date objects and canonical
    "YYYY-MM-DD" strings. Timestamps are rejected since orders store the
    calendar date only.

    Examples:
        "2025-03-01" -> date(2025, 3, 1)
        "2025-03-01T09:00:00Z" -> None
        "2025-3-1" -> None
    """
    if isinstance(value, datetime):
        return None
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    try:
        parsed = datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        return None
    return parsed if parsed.isoformat() == text else None


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored audit timestamp into an aware UTC datetime.

    Naive values are assumed to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def generate_folio(now: datetime, prefix: str = FOLIO_PREFIX) -> str:
    """
    Build a certificate folio from the issue time.

    Format: {prefix}-{year}-{last 6 digits of epoch milliseconds}.
    Not deduplicated against existing folios.

    Example:
        >>> generate_folio(datetime(2025, 3, 1, tzinfo=timezone.utc))
        'DES-2025-200000'
    """
    millis = int(now.timestamp() * 1000)
    return f"{prefix}-{now.year}-{str(millis)[-6:]}"


def next_timestamp(now: datetime, previous: Optional[datetime]) -> datetime:
    """
    Timestamp for a mutation that never moves backwards.

    Returns previous if the supplied clock is behind it.
    """
    if previous is not None and now < previous:
        return previous
    return now
