"""Unit tests for utility functions."""

from datetime import datetime, timedelta, timezone

import pytest

from pys3sync.utils import format_duration, format_size, format_timestamp


class TestFormatSize:
    """Tests for format_size function."""

    @pytest.mark.parametrize(
        "size, expected",
        [
            (0, "0 B"),
            (1023, "1023 B"),
            (1536, "1.5 KB"),
            (5 * 1024 * 1024, "5.0 MB"),
            (3 * 1024 * 1024 * 1024, "3.0 GB"),
        ],
    )
    def test_format_size(self, size, expected):
        assert format_size(size) == expected


class TestFormatTimestamp:
    """Tests for format_timestamp function."""

    def test_utc(self):
        value = datetime(2024, 5, 1, 12, 0, 3, 999999, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-05-01T12:00:03+00:00"

    def test_offset_is_kept(self):
        tz = timezone(timedelta(hours=2))
        value = datetime(2024, 5, 1, 14, 0, 0, tzinfo=tz)
        assert format_timestamp(value) == "2024-05-01T14:00:00+02:00"

    def test_naive_gets_local_offset(self):
        """Naive datetimes are treated as local time, never printed without offset."""
        result = format_timestamp(datetime(2024, 5, 1, 12, 0, 0))
        assert result.startswith("2024-05-01T12:00:00")
        assert result[19] in "+-"


class TestFormatDuration:
    """Tests for format_duration function."""

    @pytest.mark.parametrize(
        "duration, expected",
        [
            (timedelta(0), "0s"),
            (timedelta(milliseconds=250), "250ms"),
            (timedelta(seconds=3), "3s"),
            (timedelta(seconds=62, milliseconds=500), "1m2.5s"),
            (timedelta(hours=1, seconds=2), "1h0m2s"),
            (timedelta(seconds=3723.5), "1h2m3.5s"),
        ],
    )
    def test_format_duration(self, duration, expected):
        assert format_duration(duration) == expected
