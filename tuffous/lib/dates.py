import re
from datetime import date, datetime, timedelta

from dateutil import parser as dateutil_parser
from dateutil.parser import ParserError

from . import clock

_DAYS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
_DAY_ALIASES = {
    "monday": "mon",
    "tuesday": "tue",
    "wednesday": "wed",
    "thursday": "thu",
    "friday": "fri",
    "saturday": "sat",
    "sunday": "sun",
}

_MONTH_DAY_RE = re.compile(r"^(\d{1,2})-(\d{1,2})$")
_FULL_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
_STAMP_RE = re.compile(
    r"^(?:(\d{4})-)?(\d{1,2})-(\d{1,2})[-t ](\d{1,2}):(\d{2})(?::(\d{2}))?$"
)


def _dateutil_date(text: str, today: date) -> date | None:
    try:
        return dateutil_parser.parse(
            text, default=datetime(today.year, today.month, today.day)
        ).date()
    except (ParserError, ValueError, OverflowError):
        return None


def parse_date(text: str) -> date | None:
    """Parse a day spec: today, tomorrow, yesterday, a weekday, MM-DD, YYYY-MM-DD.

    Slashes work like dashes. MM-DD means the current year.
    """
    raw = text.strip().lower().replace("/", "-")
    if not raw:
        return None
    today = clock.today()

    if raw == "today":
        return today
    if raw == "tomorrow":
        return today + timedelta(days=1)
    if raw == "yesterday":
        return today - timedelta(days=1)
    raw = _DAY_ALIASES.get(raw, raw)
    if raw in _DAYS:
        days_ahead = (_DAYS.index(raw) - today.weekday() + 7) % 7
        return today + timedelta(days=days_ahead)

    try:
        if m := _FULL_DATE_RE.match(raw):
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        if m := _MONTH_DAY_RE.match(raw):
            return date(today.year, int(m.group(1)), int(m.group(2)))
    except ValueError:
        return None
    if re.match(r"^\d{1,2}:\d{2}$", raw):
        return None
    return _dateutil_date(raw, today)


def parse_datetime(text: str) -> datetime | None:
    """Parse a deadline spec: now, [YYYY-]MM-DD-HH:MM[:SS], or any day spec (midnight)."""
    raw = text.strip().lower().replace("/", "-")
    if not raw:
        return None
    if raw == "now":
        return clock.now().replace(microsecond=0)

    if m := _STAMP_RE.match(raw):
        year = int(m.group(1)) if m.group(1) else clock.today().year
        try:
            return datetime(
                year,
                int(m.group(2)),
                int(m.group(3)),
                int(m.group(4)),
                int(m.group(5)),
                int(m.group(6) or 0),
            )
        except ValueError:
            return None

    day = parse_date(raw)
    if day is not None:
        return datetime.combine(day, datetime.min.time())
    try:
        return dateutil_parser.parse(raw)
    except (ParserError, ValueError, OverflowError):
        return None


def parse_range(text: str) -> tuple[date | None, date | None]:
    """Parse 'FROM..TO'; either side may be empty for an open bound."""
    if ".." not in text:
        raise ValueError(f"Invalid range '{text}', use FROM..TO")
    start_str, end_str = text.split("..", 1)
    start = parse_date(start_str) if start_str.strip() else None
    end = parse_date(end_str) if end_str.strip() else None
    if start_str.strip() and start is None:
        raise ValueError(f"Invalid date '{start_str}'")
    if end_str.strip() and end is None:
        raise ValueError(f"Invalid date '{end_str}'")
    return start, end

