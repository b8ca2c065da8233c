from datetime import date, datetime, timedelta, timezone

import pytest

from app.core.exceptions import InvalidDateError, InvalidTimeFormatError
from app.utils.time_utils import (
    canonical_hhmm,
    normalize_utc_day,
    sort_times,
    tolerance_window,
    utc_midnight,
)


class TestNormalizeUtcDay:
    def test_plain_date_string(self):
        assert normalize_utc_day("2024-06-01") == date(2024, 6, 1)

    def test_zulu_datetime_string(self):
        assert normalize_utc_day("2024-06-01T23:30:00Z") == date(2024, 6, 1)

    def test_offset_is_converted_to_utc_day(self):
        assert normalize_utc_day("2024-06-01T22:00:00-04:00") == date(2024, 6, 2)

    def test_aware_datetime(self):
        value = datetime(2024, 6, 1, 1, 0, tzinfo=timezone(timedelta(hours=3)))
        assert normalize_utc_day(value) == date(2024, 5, 31)

    def test_date_passes_through(self):
        assert normalize_utc_day(date(2024, 6, 1)) == date(2024, 6, 1)

    @pytest.mark.parametrize("value", ["", "tomorrow", "2024-13-01", 20240601])
    def test_invalid(self, value):
        with pytest.raises(InvalidDateError):
            normalize_utc_day(value)

    def test_utc_midnight(self):
        assert utc_midnight(date(2024, 6, 1)) == datetime(2024, 6, 1, tzinfo=timezone.utc)


class TestTimes:
    def test_canonical_pads_hour(self):
        assert canonical_hhmm("9:05") == "09:05"

    @pytest.mark.parametrize("value", ["24:00", "18:60", "1800", "6pm", "18:0", "", None])
    def test_invalid_times(self, value):
        with pytest.raises(InvalidTimeFormatError):
            canonical_hhmm(value)

    def test_sort_times_is_chronological_and_deduplicated(self):
        assert sort_times(["18:30", "9:00", "18:00", "18:30"]) == ["09:00", "18:00", "18:30"]


class TestToleranceWindow:
    def test_window_around_requested_time(self):
        assert tolerance_window("18:15", 30) == ("17:45", "18:45")

    def test_clamped_at_start_of_day(self):
        assert tolerance_window("00:10", 30) == ("00:00", "00:40")

    def test_clamped_at_end_of_day(self):
        assert tolerance_window("23:50", 30) == ("23:20", "23:59")
