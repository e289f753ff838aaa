"""
Unit tests for timestamp formats and the replay window.
"""

import datetime

import pytest

from tnpg_auth import ProtocolVersion, StaleOrFutureTimestamp
from tnpg_auth.timestamps import check_freshness, format_timestamp, is_fresh, parse_timestamp

from .conftest import SIGNED_AT


class TestFormat:
    """Test timestamp rendering."""

    def test_v2_gmt(self):
        """Test the current protocol uses RFC-1123 GMT."""
        assert format_timestamp(SIGNED_AT) == "Mon, 09 Feb 2026 07:47:49 GMT"

    def test_v1_iso(self):
        """Test the legacy protocol uses ISO-8601 with a Z suffix."""
        assert format_timestamp(SIGNED_AT, ProtocolVersion.V1) == "2026-02-09T07:47:49Z"

    def test_drops_microseconds(self):
        """Test sub-second precision is not emitted."""
        moment = SIGNED_AT.replace(microsecond=999999)
        assert format_timestamp(moment, ProtocolVersion.V1) == "2026-02-09T07:47:49Z"

    def test_converts_to_utc(self):
        """Test non-UTC datetimes are converted before formatting."""
        dhaka = datetime.timezone(datetime.timedelta(hours=6))
        moment = datetime.datetime(2026, 2, 9, 13, 47, 49, tzinfo=dhaka)
        assert format_timestamp(moment) == "Mon, 09 Feb 2026 07:47:49 GMT"

    def test_naive_is_utc(self):
        """Test naive datetimes are taken as UTC."""
        assert format_timestamp(datetime.datetime(2026, 2, 9, 7, 47, 49)) == "Mon, 09 Feb 2026 07:47:49 GMT"

    def test_defaults_to_now(self):
        """Test the current time is used when none is given."""
        parsed = parse_timestamp(format_timestamp())
        now = datetime.datetime.now(datetime.timezone.utc)
        assert abs((now - parsed).total_seconds()) < 5


class TestParse:
    """Test strict timestamp parsing."""

    def test_v2(self):
        assert parse_timestamp("Mon, 09 Feb 2026 07:47:49 GMT") == SIGNED_AT

    def test_v1(self):
        assert parse_timestamp("2026-02-09T07:47:49Z", ProtocolVersion.V1) == SIGNED_AT

    def test_v1_fractional_seconds(self):
        """Test millisecond ISO timestamps are accepted for the legacy protocol."""
        parsed = parse_timestamp("2026-02-09T07:47:49.123Z", ProtocolVersion.V1)
        assert parsed == SIGNED_AT.replace(microsecond=123000)

    @pytest.mark.parametrize("value", [
        "2026-02-09T07:47:49Z",
        "Mon, 9 Feb 2026 07:47:49 GMT",
        "Mon, 09 Feb 2026 07:47:49 +0000",
        "Mon, 32 Feb 2026 07:47:49 GMT",
        "",
        "invalid",
    ])
    def test_v2_rejects(self, value):
        """Test anything but strict GMT format is rejected."""
        with pytest.raises(StaleOrFutureTimestamp):
            parse_timestamp(value)

    @pytest.mark.parametrize("value", [
        "Mon, 09 Feb 2026 07:47:49 GMT",
        "2026-02-09T07:47:49+00:00",
        "2026-02-09 07:47:49Z",
        "2026-02-30T07:47:49Z",
    ])
    def test_v1_rejects(self, value):
        """Test anything but strict ISO-8601 Z format is rejected."""
        with pytest.raises(StaleOrFutureTimestamp):
            parse_timestamp(value, ProtocolVersion.V1)

    def test_non_string(self):
        with pytest.raises(StaleOrFutureTimestamp):
            parse_timestamp(None)


class TestFreshness:
    """Test the replay window."""

    def test_exactly_at_edge_accepted(self):
        """Test a timestamp exactly 300s old is accepted."""
        now = SIGNED_AT + datetime.timedelta(seconds=300)
        assert check_freshness(SIGNED_AT, now, 300) == 300

    def test_one_second_past_edge_rejected(self):
        """Test a timestamp 301s old is rejected."""
        now = SIGNED_AT + datetime.timedelta(seconds=301)
        with pytest.raises(StaleOrFutureTimestamp):
            check_freshness(SIGNED_AT, now, 300)

    def test_small_future_skew_accepted(self):
        """Test a timestamp 1s ahead of the clock is tolerated."""
        now = SIGNED_AT - datetime.timedelta(seconds=1)
        assert check_freshness(SIGNED_AT, now, 300) == -1

    def test_future_edge_accepted(self):
        now = SIGNED_AT - datetime.timedelta(seconds=300)
        assert check_freshness(SIGNED_AT, now, 300) == -300

    def test_far_future_rejected(self):
        """Test a timestamp far ahead of the clock is rejected."""
        now = SIGNED_AT - datetime.timedelta(hours=1)
        with pytest.raises(StaleOrFutureTimestamp) as excinfo:
            check_freshness(SIGNED_AT, now, 300)
        assert "future" in str(excinfo.value)

    def test_custom_window(self):
        now = SIGNED_AT + datetime.timedelta(seconds=400)
        assert check_freshness(SIGNED_AT, now, 600) == 400

    def test_is_fresh(self):
        """Test the boolean helper."""
        value = "Mon, 09 Feb 2026 07:47:49 GMT"
        assert is_fresh(value, SIGNED_AT + datetime.timedelta(seconds=10)) is True
        assert is_fresh(value, SIGNED_AT + datetime.timedelta(seconds=600)) is False
        assert is_fresh("invalid", SIGNED_AT) is False
        assert is_fresh("2026-02-09T07:47:49Z", SIGNED_AT, version=ProtocolVersion.V1) is True
