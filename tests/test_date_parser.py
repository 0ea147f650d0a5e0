from datetime import date
from zoneinfo import ZoneInfo

import pytest

from app.application.utils.date_parser import format_travel_date, parse_travel_date

MSK = ZoneInfo("Europe/Moscow")
REFERENCE = date(2026, 10, 17)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("today", date(2026, 10, 17)),
        ("Tomorrow", date(2026, 10, 18)),
        ("day after tomorrow", date(2026, 10, 19)),
        ("завтра", date(2026, 10, 18)),
        ("послезавтра", date(2026, 10, 19)),
        ("20.10.2026", date(2026, 10, 20)),
        (" 1.2.2027 ", date(2027, 2, 1)),
        ("25.12", date(2026, 12, 25)),
        ("17.10", date(2026, 10, 17)),
    ],
)
def test_accepted_dates(text, expected):
    assert parse_travel_date(text, MSK, reference_date=REFERENCE) == expected


def test_short_date_already_past_rolls_into_next_year():
    assert parse_travel_date("05.01", MSK, reference_date=REFERENCE) == date(2027, 1, 5)


def test_past_full_date_is_returned_unchanged():
    assert parse_travel_date("01.01.2020", MSK, reference_date=REFERENCE) == date(2020, 1, 1)


@pytest.mark.parametrize("text", ["", "soon", "31.02.2026", "2026-10-20", "32.01", "20/10/2026"])
def test_rejected_dates(text):
    assert parse_travel_date(text, MSK, reference_date=REFERENCE) is None


def test_format_uses_upstream_layout():
    assert format_travel_date(date(2026, 2, 3)) == "03.02.2026"
