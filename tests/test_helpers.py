from datetime import date, datetime

import pytest

from loto.utils.helpers import format_relative_datetime, parse_date, parse_date_input

NOW = datetime(2024, 3, 10, 15, 30)  # a Sunday


def test_today():
    assert format_relative_datetime(datetime(2024, 3, 10, 9, 5), NOW) == "Today at 9:05 AM"


def test_yesterday():
    assert format_relative_datetime(datetime(2024, 3, 9, 23, 59), NOW) == "Yesterday at 11:59 PM"


def test_within_the_week_uses_weekday():
    assert format_relative_datetime(datetime(2024, 3, 5, 12, 0), NOW) == "Tuesday at 12:00 PM"


def test_older_uses_full_date():
    assert format_relative_datetime(datetime(2024, 3, 3, 15, 5), NOW) == "March 3, 2024 at 3:05 PM"


def test_none_is_none():
    assert format_relative_datetime(None, NOW) is None


@pytest.mark.parametrize("raw, expected", [
    ("2024-03-04", date(2024, 3, 4)),
    ("2024-03-04T10:00:00", date(2024, 3, 4)),
    ("03/04/2024", date(2024, 3, 4)),
    ("03/04/24", date(2024, 3, 4)),
    (date(2024, 3, 4), date(2024, 3, 4)),
    ("", None),
    ("someday", None),
])
def test_parse_date(raw, expected):
    assert parse_date(raw) == expected


def test_parse_date_input_raises_on_garbage():
    with pytest.raises(ValueError):
        parse_date_input("31/31/2024")
    assert parse_date_input(None) is None
