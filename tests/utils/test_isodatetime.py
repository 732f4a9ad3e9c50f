"""Tests for isodatetime module."""

from datetime import datetime, UTC, timedelta

from authtrail.utils import isodatetime


class TestUtcnow:
    def test_is_aware_utc(self):
        result = isodatetime.utcnow()
        assert result.tzinfo is not None
        assert result.utcoffset() == timedelta(0)


class TestToTimestamp:
    """Tests for to_timestamp function."""

    def test_naive_datetime_treated_as_utc(self):
        assert isodatetime.to_timestamp(datetime(2025, 6, 1, 10, 30)) == "2025-06-01T10:30:00Z"

    def test_aware_datetime(self):
        dt = datetime(2025, 6, 1, 10, 30, tzinfo=UTC)
        assert isodatetime.to_timestamp(dt) == "2025-06-01T10:30:00Z"

    def test_keeps_microseconds(self):
        dt = datetime(2025, 6, 1, 10, 30, 0, 123456, tzinfo=UTC)
        assert isodatetime.to_timestamp(dt) == "2025-06-01T10:30:00.123456Z"


class TestToDatetime:
    """Tests for to_datetime function."""

    def test_parses_z_suffix(self):
        result = isodatetime.to_datetime("2025-06-01T10:30:00Z")
        assert result == datetime(2025, 6, 1, 10, 30, tzinfo=UTC)

    def test_parses_explicit_offset(self):
        result = isodatetime.to_datetime("2025-06-01T10:30:00+00:00")
        assert result == datetime(2025, 6, 1, 10, 30, tzinfo=UTC)


class TestNow:
    def test_returns_parseable_z_timestamp(self):
        result = isodatetime.now()
        assert result.endswith("Z")
        assert isinstance(isodatetime.to_datetime(result), datetime)


class TestUnix:
    """Tests for unix second conversions used by token claims."""

    def test_to_unix(self):
        assert isodatetime.to_unix(datetime(1970, 1, 1, 0, 1, tzinfo=UTC)) == 60

    def test_to_unix_naive_is_utc(self):
        assert isodatetime.to_unix(datetime(1970, 1, 1, 0, 1)) == 60

    def test_from_unix(self):
        assert isodatetime.from_unix(60) == datetime(1970, 1, 1, 0, 1, tzinfo=UTC)

    def test_now_unix_is_recent(self):
        before = isodatetime.to_unix(datetime.now(UTC))
        result = isodatetime.now_unix()
        assert before <= result <= before + 1
