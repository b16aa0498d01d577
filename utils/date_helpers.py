from datetime import date, datetime, timedelta
import calendar
from utils.constants import DATE_FORMAT, MONTH_FORMAT

SUNDAY = 6


def today() -> date:
    return date.today()


def today_str() -> str:
    return date.today().strftime(DATE_FORMAT)


def current_month_str() -> str:
    return date.today().strftime(MONTH_FORMAT)


def as_date(value: date | datetime) -> date:
    """Drop the time of day from a datetime; plain dates pass through."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raise TypeError(f"Expected a date, got {type(value).__name__}")


def parse_date(date_str: str) -> date | None:
    """Parse a stored date string, returning None on failure.

    Accepts YYYY-MM-DD plus full ISO timestamps (the browser build stored
    `toISOString()` values), keeping only the calendar date.
    """
    if not date_str:
        return None
    date_str = date_str.strip()
    for fmt in ("%Y-%m-%d", "%Y/%m/%d", "%Y.%m.%d"):
        try:
            return datetime.strptime(date_str, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(date_str.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def format_date(d: date) -> str:
    return d.strftime(DATE_FORMAT)


def format_month(d: date) -> str:
    return d.strftime(MONTH_FORMAT)


def parse_month(month_str: str) -> date | None:
    """Return the first day of the given YYYY-MM month string."""
    if not month_str:
        return None
    try:
        return datetime.strptime(month_str, MONTH_FORMAT).date()
    except ValueError:
        return None


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """Return (first_day, last_day) of a calendar month."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def prev_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    return format_month(add_months(d, -1))


def next_month(month_str: str) -> str:
    d = parse_month(month_str)
    if d is None:
        raise ValueError(f"Invalid month: {month_str}")
    return format_month(add_months(d, 1))


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def months_between(start: date, end: date) -> int:
    """Whole calendar months from start's month to end's month (days ignored)."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def iter_days(start: date, end: date):
    """Yield every date from start to end inclusive; nothing if end < start."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def month_grid(year: int, month: int, first_weekday: int = SUNDAY) -> list[list[date]]:
    """Weeks covering the month, padded with neighbouring days to whole weeks."""
    cal = calendar.Calendar(firstweekday=first_weekday)
    return [list(week) for week in cal.monthdatescalendar(year, month)]


def friendly_month(month_str: str) -> str:
    """Convert YYYY-MM to e.g. 'February 2026'."""
    d = parse_month(month_str)
    if d is None:
        return month_str
    return d.strftime("%B %Y")


def _ordinal(n: int) -> str:
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def format_long_date(d: date) -> str:
    """e.g. 'April 29th, 2024', the form used in exported reports."""
    return f"{d.strftime('%B')} {_ordinal(d.day)}, {d.year}"
