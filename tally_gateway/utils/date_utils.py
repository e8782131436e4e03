"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Any, Optional


def month_bucket_delta(start: date, end: date) -> int:
    """
    Whole calendar months between two dates, counted on year/month only.

    Day-of-month is ignored: Jan 31 -> Feb 1 and Jan 1 -> Feb 28 are both 1.
    The result is negative when ``end`` falls in an earlier month than ``start``.
    """
    return (end.year - start.year) * 12 + (end.month - start.month)


def parse_date(value: Any) -> Optional[date]:
    """
    Coerce a stored date value into a ``date``.

    Accepts ``date``/``datetime`` objects and ISO-8601 strings (a time part,
    including a trailing ``Z``, is dropped). ``None`` and blank strings map to None.

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if len(text) > 10:
            # "2024-01-01T00:00:00Z" and friends
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        return date.fromisoformat(text)
    raise ValueError(f"Unsupported date value: {value!r}")
