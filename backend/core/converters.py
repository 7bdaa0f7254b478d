import math
import re
from datetime import date, datetime, timezone
from typing import Any

from core.errors import ValidationError

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Upper bound for a single count; four buckets summed still fit a 64-bit column.
MAX_COUNT = 1_000_000_000


def as_count(x: Any) -> int:
    """Coerce an egg count to a non-negative int.

    Strings are read up to the first non-digit ("12 cartons" -> 12), anything
    that does not start with a number becomes 0, and negatives are clamped to 0.
    """
    if x is None or isinstance(x, bool):
        return 0
    if isinstance(x, int):
        n = x
    elif isinstance(x, float):
        if not math.isfinite(x):
            return 0
        n = int(x)
    else:
        m = _LEADING_INT.match(str(x))
        if not m:
            return 0
        n = int(m.group(1))
    return max(n, 0)


def as_price(x: Any) -> float:
    if x is None or isinstance(x, bool):
        return 0.0
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(v) or v < 0:
        return 0.0
    return v


def today_utc() -> date:
    return datetime.now(timezone.utc).date()


def as_event_date(x: Any) -> date:
    """Event day. Missing or empty values mean today (UTC)."""
    if x is None or x == "":
        return today_utc()
    if isinstance(x, datetime):
        return x.date()
    if isinstance(x, date):
        return x
    try:
        return date.fromisoformat(str(x).strip())
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD")


def check_count(name: str, n: int) -> int:
    if n > MAX_COUNT:
        raise ValidationError(f"{name} must be at most {MAX_COUNT}")
    return n
