"""Date parsing and calendar window utilities."""

from datetime import date, timedelta
from typing import Iterator, Optional
from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

BUDGET_PERIODS = ("current-month", "last-month", "quarter", "year")


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports absolute dates ("2024-01-15", "January 15, 2024") and a few
    relative forms: "today", "yesterday", "this month", "last month",
    "this quarter", "this year", "last year". Relative month, quarter and
    year forms return the first day of that period.

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "this month": month_start(today),
        "last month": month_start(today - relativedelta(months=1)),
        "this quarter": quarter_start(today),
        "this year": today.replace(month=1, day=1),
        "last year": today.replace(month=1, day=1) - relativedelta(years=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        return date_parser.parse(date_str).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def month_start(day: date) -> date:
    """First day of the month containing ``day``."""
    return day.replace(day=1)


def month_end(day: date) -> date:
    """Last day of the month containing ``day``."""
    return month_start(day) + relativedelta(months=1) - timedelta(days=1)


def quarter_start(day: date) -> date:
    """First day of the calendar quarter containing ``day``."""
    first_month = ((day.month - 1) // 3) * 3 + 1
    return date(day.year, first_month, 1)


def period_window(period: str, today: Optional[date] = None) -> tuple[date, date]:
    """Get calendar start and end dates for a budget period.

    Args:
        period: One of current-month, last-month, quarter, year
        today: Reference date (defaults to today)

    Returns:
        Tuple of (start_date, end_date), both inclusive, covering the whole
        calendar period rather than stopping at ``today``

    Raises:
        ValueError: If period string is not recognized
    """
    period = period.strip().lower()
    if today is None:
        today = date.today()

    if period == "current-month":
        return (month_start(today), month_end(today))

    elif period == "last-month":
        previous = today - relativedelta(months=1)
        return (month_start(previous), month_end(previous))

    elif period == "quarter":
        start_date = quarter_start(today)
        end_date = start_date + relativedelta(months=3) - timedelta(days=1)
        return (start_date, end_date)

    elif period == "year":
        return (date(today.year, 1, 1), date(today.year, 12, 31))

    else:
        raise ValueError(
            f"Unknown period: '{period}'. Supported periods: {', '.join(BUDGET_PERIODS)}"
        )


def days_in_range(start_date: date, end_date: date) -> int:
    """Number of calendar days from start to end, both inclusive (minimum 1)."""
    return max(1, (end_date - start_date).days + 1)


def iter_days(start_date: date, end_date: date) -> Iterator[date]:
    """Yield each date from start to end inclusive."""
    current = start_date
    while current <= end_date:
        yield current
        current += timedelta(days=1)
