"""Date parsing utilities."""

from datetime import date, datetime, timedelta
from typing import Optional

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from shopledger.domain.entities import PeriodWindow

PERIOD_ALIASES = {
    "today": PeriodWindow.TODAY,
    "day": PeriodWindow.TODAY,
    "week": PeriodWindow.THIS_WEEK,
    "this-week": PeriodWindow.THIS_WEEK,
    "this week": PeriodWindow.THIS_WEEK,
    "month": PeriodWindow.THIS_MONTH,
    "this-month": PeriodWindow.THIS_MONTH,
    "this month": PeriodWindow.THIS_MONTH,
    "year": PeriodWindow.THIS_YEAR,
    "this-year": PeriodWindow.THIS_YEAR,
    "this year": PeriodWindow.THIS_YEAR,
    "all": PeriodWindow.ALL,
}


def parse_date(date_str: str, today: Optional[date] = None) -> date:
    """Parse a date string into a date object.

    Supports various formats including relative dates:
    - Absolute dates: "2024-01-15", "January 15, 2024", etc.
    - Relative dates: "today", "yesterday", "tomorrow", "next week",
      "next month", "in 7 days"

    Args:
        date_str: Date string in various formats
        today: Reference date for relative dates (defaults to date.today())

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = today or date.today()

    # Handle relative dates
    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
        "tomorrow": today + timedelta(days=1),
        "next week": today + timedelta(weeks=1),
        "next month": today + relativedelta(months=1),
    }

    if date_str in relative_dates:
        return relative_dates[date_str]

    # Handle "in N days"
    if date_str.startswith("in ") and date_str.endswith(" days"):
        count = date_str[3:-5].strip()
        if count.isdigit():
            return today + timedelta(days=int(count))

    # Try parsing as absolute date
    try:
        dt = date_parser.parse(date_str)
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def parse_occurred_at(date_str: Optional[str], now: datetime) -> datetime:
    """Resolve a movement/transaction date to an instant.

    The parsed date is combined with ``now``'s time of day, so entries
    made today keep their order relative to other entries made today.
    A missing date means ``now``.
    """
    if not date_str:
        return now
    return datetime.combine(parse_date(date_str, today=now.date()), now.time())


def parse_period(period: str) -> PeriodWindow:
    """Parse a reporting period name into a PeriodWindow.

    Args:
        period: today, week/this-week, month/this-month, year/this-year or all

    Returns:
        The matching PeriodWindow

    Raises:
        ValueError: If period string is not recognized
    """
    key = period.strip().lower()
    if key in PERIOD_ALIASES:
        return PERIOD_ALIASES[key]
    raise ValueError(
        f"Unknown period: '{period}'. Supported periods: "
        + ", ".join(window.value for window in PeriodWindow)
    )
