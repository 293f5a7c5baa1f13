from datetime import date, datetime, timedelta, timezone

import pytest

from obsidian_cortex.core.dates import days_between, parse_date_input, to_iso_date, to_iso_timestamp

from tests.conftest import FIXED_NOW


class TestParseDateInput:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("2026-10-01", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ("2026-10-01T08:30:00.000Z", datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)),
            ("2026-10-01T10:30:00+02:00", datetime(2026, 10, 1, 8, 30, tzinfo=timezone.utc)),
            ("2026/10/01", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ("2026/10/01 14:05", datetime(2026, 10, 1, 14, 5, tzinfo=timezone.utc)),
            ("10/01/2026", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ("Oct 1, 2026", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ("October 1, 2026", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            ("1 Oct 2026", datetime(2026, 10, 1, tzinfo=timezone.utc)),
            (" 2026-10-01 ", datetime(2026, 10, 1, tzinfo=timezone.utc)),
        ],
    )
    def test_accepted_strings(self, value, expected):
        assert parse_date_input(value) == expected

    @pytest.mark.parametrize("value", ["last week", "2026-13-01", "", "   ", None, 20261001])
    def test_unparseable_values(self, value):
        assert parse_date_input(value) is None

    def test_date_and_datetime_objects(self):
        assert parse_date_input(date(2026, 10, 1)) == datetime(2026, 10, 1, tzinfo=timezone.utc)
        naive = datetime(2026, 10, 1, 9, 0)
        assert parse_date_input(naive) == datetime(2026, 10, 1, 9, 0, tzinfo=timezone.utc)


def test_timestamp_format():
    assert to_iso_timestamp(FIXED_NOW) == "2026-10-18T12:00:00.000Z"
    assert to_iso_date(FIXED_NOW) == "2026-10-18"


def test_days_between_floors():
    assert days_between(FIXED_NOW - timedelta(days=3, hours=23), FIXED_NOW) == 3
