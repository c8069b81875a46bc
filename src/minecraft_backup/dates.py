"""Calendar helpers for the monthly repository rotation."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Tuple, Union

DateLike = Union[date, datetime]


def months_before(reference: DateLike, months: int) -> Tuple[int, int]:
    """
    Return ``(year, month)`` that lies ``months`` calendar months before ``reference``.

    Only year and month take part, so the 31st of a month never spills into
    the following one:

    >>> months_before(date(2024, 1, 15), 2)
    (2023, 11)
    >>> months_before(date(2024, 4, 30), 2)
    (2024, 2)
    """
    if months < 0:
        raise ValueError("months must be >= 0")
    # Count months from year 0 so the rollover falls out of divmod.
    index = reference.year * 12 + (reference.month - 1) - months
    year, month0 = divmod(index, 12)
    return (year, month0 + 1)


def today(now: Optional[DateLike] = None) -> DateLike:
    return now if now is not None else datetime.now()


__all__ = ["months_before", "today", "DateLike"]
