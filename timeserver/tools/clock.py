"""Date/time helpers backing the time tools.

Thin layer over :mod:`datetime` and :mod:`zoneinfo` that accepts the loose
date strings clients send, formats with dayjs-style tokens (``YYYY-MM-DD
HH:mm:ss``) and answers calendar questions: days in a month, week numbers and
humanized distances such as "3 days ago".
"""

import calendar
import math
import re
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_FORMAT = "YYYY-MM-DD HH:mm:ss"

# Accepted in addition to everything datetime.fromisoformat understands.
_FALLBACK_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d %H:%M",
    "%Y/%m/%d",
    "%Y-%m",
    "%Y",
)

_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)
_WEEKDAY_NAMES = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")

_FORMAT_TOKENS = re.compile(
    r"\[([^\]]*)\]|YYYY|YY|MMMM|MMM|MM|M|DD|D|dddd|ddd|dd|d|HH|H|hh|h|mm|m|ss|s|SSS|A|a|ZZ|Z"
)

# (label, upper bound, unit the amount is measured in); a None unit keeps the previous amount.
_RELATIVE_THRESHOLDS: tuple[tuple[str, int | None, str | None], ...] = (
    ("s", 44, "second"),
    ("m", 89, None),
    ("mm", 44, "minute"),
    ("h", 89, None),
    ("hh", 21, "hour"),
    ("d", 35, None),
    ("dd", 25, "day"),
    ("M", 45, None),
    ("MM", 10, "month"),
    ("y", 17, None),
    ("yy", None, "year"),
)
_RELATIVE_PHRASES = {
    "s": "a few seconds",
    "m": "a minute",
    "mm": "{} minutes",
    "h": "an hour",
    "hh": "{} hours",
    "d": "a day",
    "dd": "{} days",
    "M": "a month",
    "MM": "{} months",
    "y": "a year",
    "yy": "{} years",
}
_SECONDS_PER_UNIT = {
    "second": 1.0,
    "minute": 60.0,
    "hour": 3600.0,
    "day": 86400.0,
    "month": 86400.0 * 365.2425 / 12,
    "year": 86400.0 * 365.2425,
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return math.floor(value + 0.5)


def get_zone(name: str) -> ZoneInfo:
    """Resolve an IANA timezone name.

    Raises:
        ValueError: If the name is not a known timezone.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"Invalid timezone: {name}") from exc


def parse_datetime(text: str, zone: tzinfo) -> datetime:
    """Parse a date or date-time string.

    Naive values are interpreted as wall time in ``zone``; values carrying an
    explicit offset keep it.

    Raises:
        ValueError: If the string is not a recognizable date.
    """
    value = text.strip()
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        for fmt in _FALLBACK_FORMATS:
            try:
                parsed = datetime.strptime(value, fmt)
                break
            except ValueError:
                continue
        else:
            raise ValueError(f"Invalid date: {text}") from None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone)
    return parsed


def utc_offset_minutes(value: datetime) -> int:
    offset = value.utcoffset()
    return int(offset.total_seconds() // 60) if offset is not None else 0


def _format_offset(value: datetime, separator: str) -> str:
    minutes = utc_offset_minutes(value)
    sign = "+" if minutes >= 0 else "-"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _format_token(value: datetime, token: str) -> str:
    weekday = (value.weekday() + 1) % 7
    hour12 = value.hour % 12 or 12
    match token:
        case "YYYY":
            return f"{value.year:04d}"
        case "YY":
            return f"{value.year % 100:02d}"
        case "MMMM":
            return _MONTH_NAMES[value.month - 1]
        case "MMM":
            return _MONTH_NAMES[value.month - 1][:3]
        case "MM":
            return f"{value.month:02d}"
        case "M":
            return str(value.month)
        case "DD":
            return f"{value.day:02d}"
        case "D":
            return str(value.day)
        case "dddd":
            return _WEEKDAY_NAMES[weekday]
        case "ddd":
            return _WEEKDAY_NAMES[weekday][:3]
        case "dd":
            return _WEEKDAY_NAMES[weekday][:2]
        case "d":
            return str(weekday)
        case "HH":
            return f"{value.hour:02d}"
        case "H":
            return str(value.hour)
        case "hh":
            return f"{hour12:02d}"
        case "h":
            return str(hour12)
        case "mm":
            return f"{value.minute:02d}"
        case "m":
            return str(value.minute)
        case "ss":
            return f"{value.second:02d}"
        case "s":
            return str(value.second)
        case "SSS":
            return f"{value.microsecond // 1000:03d}"
        case "A":
            return "AM" if value.hour < 12 else "PM"
        case "a":
            return "am" if value.hour < 12 else "pm"
        case "ZZ":
            return _format_offset(value, "")
        case "Z":
            return _format_offset(value, ":")
    return token


def format_datetime(value: datetime, fmt: str = DEFAULT_FORMAT) -> str:
    """Format using dayjs-style tokens; text inside ``[...]`` is emitted verbatim."""

    def replace(match: re.Match[str]) -> str:
        if match.group(1) is not None:
            return match.group(1)
        return _format_token(value, match.group(0))

    return _FORMAT_TOKENS.sub(replace, fmt)


def humanize_relative(target: datetime, now: datetime) -> str:
    """Describe ``target`` relative to ``now``, e.g. "in 2 hours" or "3 days ago"."""
    seconds = (target - now).total_seconds()
    result = 0.0
    amount = 0
    phrase = ""

    for index, (label, limit, unit) in enumerate(_RELATIVE_THRESHOLDS):
        if unit is not None:
            result = seconds / _SECONDS_PER_UNIT[unit]
            amount = round_half_up(abs(result))
        if limit is None or amount <= limit:
            if amount <= 1 and index > 0:
                label = _RELATIVE_THRESHOLDS[index - 1][0]
            phrase = _RELATIVE_PHRASES[label].format(amount)
            break

    return f"in {phrase}" if result > 0 else f"{phrase} ago"


def days_in_month(value: date) -> int:
    return calendar.monthrange(value.year, value.month)[1]


def _start_of_week(value: date) -> date:
    # Weeks start on Sunday.
    return value - timedelta(days=(value.weekday() + 1) % 7)


def week_of_year(value: date) -> int:
    """Week number with Sunday-start weeks where the week holding January 1st is week 1."""
    if isinstance(value, datetime):
        value = value.date()
    start = _start_of_week(value)
    if value.month == 12 and value.day > 25 and start + timedelta(days=6) >= date(value.year + 1, 1, 1):
        return 1
    first_week = _start_of_week(date(value.year, 1, 1))
    return (start - first_week).days // 7 + 1


def iso_week(value: date) -> int:
    return value.isocalendar()[1]
