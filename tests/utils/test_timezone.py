"""Tests for utils/timezone.py - UTC timestamps, business-local dates."""

from datetime import date, datetime, timezone
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest

from utils.timezone import BUSINESS_TIMEZONE, business_today, now_utc, to_utc, to_local, parse_iso


class TestNowUtc:

    def test_aware_and_utc(self):
        result = now_utc()
        assert result.tzinfo == timezone.utc


class TestToUtc:

    def test_raises_on_naive(self):
        with pytest.raises(ValueError, match="naive"):
            to_utc(datetime(2024, 1, 1, 12, 0))

    def test_converts_ist(self):
        """12:00 IST is 06:30 UTC."""
        ist = datetime(2024, 1, 1, 12, 0, tzinfo=ZoneInfo("Asia/Kolkata"))

        result = to_utc(ist)

        assert result.tzinfo == timezone.utc
        assert (result.hour, result.minute) == (6, 30)


class TestToLocal:

    def test_defaults_to_business_timezone(self):
        result = to_local(datetime(2024, 1, 1, 6, 30, tzinfo=timezone.utc))

        assert (result.hour, result.minute) == (12, 0)
        assert str(result.tzinfo) == BUSINESS_TIMEZONE

    def test_named_zone(self):
        result = to_local(datetime(2024, 1, 1, 6, 30, tzinfo=timezone.utc), "Asia/Dubai")

        assert (result.hour, result.minute) == (10, 30)

    def test_raises_on_naive(self):
        with pytest.raises(ValueError, match="naive"):
            to_local(datetime(2024, 1, 1, 12, 0))

    def test_raises_on_invalid_timezone(self):
        with pytest.raises(ValueError, match="Unknown timezone"):
            to_local(now_utc(), "Not/A/Timezone")


class TestParseIso:
    """Session records round-trip through isoformat()."""

    def test_round_trips_isoformat(self):
        stamp = datetime(2024, 3, 31, 20, 15, tzinfo=timezone.utc)

        assert parse_iso(stamp.isoformat()) == stamp

    def test_offset_normalized_to_utc(self):
        result = parse_iso("2024-01-01T12:00:00+05:30")

        assert result.tzinfo == timezone.utc
        assert (result.hour, result.minute) == (6, 30)

    def test_zulu_suffix(self):
        assert parse_iso("2024-01-01T12:00:00Z").hour == 12

    def test_raises_without_offset(self):
        with pytest.raises(ValueError, match="no timezone offset"):
            parse_iso("2024-01-01T12:00:00")


class TestBusinessToday:

    def test_returns_date(self):
        assert isinstance(business_today(), date)

    def test_local_day_ahead_of_utc(self):
        """20:00 UTC on March 31 is already April 1 in Kolkata."""
        late_utc = datetime(2024, 3, 31, 20, 0, tzinfo=timezone.utc)

        with patch("utils.timezone.now_utc", return_value=late_utc):
            assert business_today() == date(2024, 4, 1)
            assert business_today("UTC") == date(2024, 3, 31)

    def test_same_day_in_the_morning(self):
        early_utc = datetime(2024, 3, 31, 2, 0, tzinfo=timezone.utc)

        with patch("utils.timezone.now_utc", return_value=early_utc):
            assert business_today() == date(2024, 3, 31)
