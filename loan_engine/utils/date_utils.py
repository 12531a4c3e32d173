"""Date manipulation utilities"""

from datetime import date, datetime
from typing import Union

from dateutil import parser
from dateutil.relativedelta import relativedelta

DateLike = Union[str, date, datetime]


def parse_date(value: DateLike) -> date:
    """
    Parse a calendar date, truncated to day granularity.

    Accepts `date`, `datetime` or a date/datetime string ("2024-01-15",
    "2024-01-15T10:30:00"). Raises ValueError when the value can't be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date: {value!r}")
    try:
        return parser.isoparse(value.strip()).date()
    except (ValueError, OverflowError) as e:
        raise ValueError(f"Not a date: {value!r}") from e


def add_months(from_date: date, months: int) -> date:
    """
    Add whole calendar months to a date.

    Month-end overflow is clamped to the last day of the target month:
    2024-01-31 + 1 month = 2024-02-29, 2023-01-31 + 1 month = 2023-02-28.
    """
    return from_date + relativedelta(months=months)


class SystemClock:
    """Wall-clock source of the current date"""

    def today(self) -> date:
        return date.today()
