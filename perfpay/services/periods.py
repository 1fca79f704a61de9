"""
Calendar-month period keys (``YYYY-MM``) and the arithmetic on them.
"""
import calendar
import re
from datetime import date, datetime
from typing import Iterator, Tuple

from perfpay.core.exceptions import ValidationFailure

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{2})$")


def parse_period(period: str) -> Tuple[int, int]:
    """Split a period key into ``(year, month)``, rejecting malformed keys."""
    match = _PERIOD_RE.match(period or "")
    if not match:
        raise ValidationFailure(f"Invalid period '{period}', expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationFailure(f"Invalid month in period '{period}'")
    return year, month


def format_period(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def current_period(today: date = None) -> str:
    today = today or date.today()
    return format_period(today.year, today.month)


def previous_period(period: str) -> str:
    year, month = parse_period(period)
    if month == 1:
        return format_period(year - 1, 12)
    return format_period(year, month - 1)


def month_bounds(period: str) -> Tuple[datetime, datetime]:
    """First and last instant of the month, as naive datetimes."""
    year, month = parse_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return (
        datetime(year, month, 1),
        datetime(year, month, last_day, 23, 59, 59),
    )


def working_days(period: str) -> int:
    """Weekdays (Mon-Fri) in the month."""
    year, month = parse_period(period)
    last_day = calendar.monthrange(year, month)[1]
    return sum(
        1 for day in range(1, last_day + 1)
        if date(year, month, day).weekday() < 5
    )


class PeriodWindow:
    """
    The ``count`` periods ending at and including ``end``.

    Iterating walks backward month by month; each ``iter()`` starts over, so
    the window can be consumed any number of times.
    """

    def __init__(self, end: str, count: int):
        parse_period(end)
        if count < 1:
            raise ValidationFailure("count must be at least 1")
        self.end = end
        self.count = count

    def __iter__(self) -> Iterator[str]:
        period = self.end
        for _ in range(self.count):
            yield period
            period = previous_period(period)

    def __len__(self) -> int:
        return self.count

    def ascending(self) -> list:
        return sorted(self)
