from datetime import datetime, timedelta, timezone

from babylog.time_normalizer import normalize_time

NOW = datetime(2025, 3, 12, 15, 30, tzinfo=timezone.utc)


def test_now_returns_reference_time_exactly() -> None:
    assert normalize_time("now", NOW) == NOW
    assert normalize_time("NOW", NOW) == NOW
    assert normalize_time("  Now ", NOW) == NOW


def test_relative_minutes_and_hours() -> None:
    assert normalize_time("5 minutes ago", NOW) == NOW - timedelta(minutes=5)
    assert normalize_time("1 minute ago", NOW) == NOW - timedelta(minutes=1)
    assert normalize_time("2 hours ago", NOW) == NOW - timedelta(hours=2)
    assert normalize_time("1 Hour Ago", NOW) == NOW - timedelta(hours=1)
    assert normalize_time("about 10 minutes ago", NOW) == NOW - timedelta(minutes=10)


def test_iso_strings_are_taken_as_is() -> None:
    assert normalize_time("2025-03-12T09:15:00Z", NOW) == datetime(2025, 3, 12, 9, 15, tzinfo=timezone.utc)
    offset = normalize_time("2025-03-12T09:15:00-07:00", NOW)
    assert offset == datetime(2025, 3, 12, 16, 15, tzinfo=timezone.utc)


def test_naive_iso_adopts_reference_timezone() -> None:
    result = normalize_time("2025-03-11T22:00:00", NOW)
    assert result == datetime(2025, 3, 11, 22, 0, tzinfo=timezone.utc)
    assert result.tzinfo is not None


def test_unparseable_input_falls_back_to_now() -> None:
    for expression in ["garbage-text", "", None, "yesterday-ish", "a while ago", "99999999999999 hours ago"]:
        assert normalize_time(expression, NOW) == NOW, expression
