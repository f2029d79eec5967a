"""Date manipulation utilities"""

from datetime import date, datetime, timedelta
from typing import Optional, Union

DAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


def parse_iso_date(value: Union[str, date, None]) -> Optional[date]:
    """Parse a YYYY-MM-DD string (or pass a date through); None when unparseable"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value:
        return None
    text = value.strip()
    try:
        if len(text) == 10:
            return date.fromisoformat(text)
        # Full ISO timestamps must be valid as a whole, not just their first 10 chars
        if len(text) > 10 and text[10] in ("T", " "):
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None
    return None


def day_of_week(day: date) -> int:
    """0=Sunday ... 6=Saturday"""
    return (day.weekday() + 1) % 7


def day_name(day: date) -> str:
    return DAY_NAMES[day_of_week(day)]


def week_start(day: date) -> date:
    """Monday of the ISO week containing day (Sunday maps to the previous Monday)"""
    return day - timedelta(days=day.weekday())


def format_period_range(start: Optional[date], end: Optional[date]) -> str:
    """en-GB period label: 03/03/2025 - 09/03/2025, a single date, or 'No data'"""
    if start is None or end is None:
        return "No data"
    if start == end:
        return start.strftime("%d/%m/%Y")
    return f"{start.strftime('%d/%m/%Y')} - {end.strftime('%d/%m/%Y')}"
