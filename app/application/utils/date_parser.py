from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

RELATIVE_DAYS = {
    "today": 0,
    "сегодня": 0,
    "tomorrow": 1,
    "завтра": 1,
    "day after tomorrow": 2,
    "послезавтра": 2,
}

_FULL_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{4})$")
_SHORT_DATE = re.compile(r"^(\d{1,2})\.(\d{1,2})$")


def parse_travel_date(text: str, timezone: ZoneInfo, reference_date: date | None = None) -> date | None:
    """Parse a departure date typed by the user. Returns None if it is not a date.

    Past dates are returned as-is; upstream decides whether they are bookable.
    """
    if reference_date is None:
        reference_date = datetime.now(timezone).date()

    normalized = text.lower().strip()

    if normalized in RELATIVE_DAYS:
        return reference_date + timedelta(days=RELATIVE_DAYS[normalized])

    match = _FULL_DATE.match(normalized)
    if match:
        day, month, year = (int(g) for g in match.groups())
        try:
            return date(year, month, day)
        except ValueError:
            return None

    match = _SHORT_DATE.match(normalized)
    if match:
        day, month = int(match.group(1)), int(match.group(2))
        year = reference_date.year
        if month < reference_date.month or (month == reference_date.month and day < reference_date.day):
            year += 1
        try:
            return date(year, month, day)
        except ValueError:
            return None

    return None


def format_travel_date(value: date, date_format: str = "%d.%m.%Y") -> str:
    return value.strftime(date_format)
