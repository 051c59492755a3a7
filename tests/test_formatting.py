from datetime import datetime, timedelta, timezone

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.utils.formatting import (
    activity_type_info,
    format_date,
    format_distance,
    format_pace,
    format_relative,
    format_speed,
    format_time,
)


@pytest.mark.parametrize(
    ("meters", "expected"),
    [(0, "0.0 km"), (10234.5, "10.2 km"), (42195, "42.2 km")],
)
def test_format_distance(meters: float, expected: str) -> None:
    assert format_distance(meters) == expected


@pytest.mark.parametrize(
    ("seconds", "expected"),
    [(59, "0m"), (2520, "42m"), (3125, "52m"), (3900, "1h 5m"), (7200, "2h 0m")],
)
def test_format_time(seconds: int, expected: str) -> None:
    assert format_time(seconds) == expected


def test_format_pace_for_runs_and_swims() -> None:
    # 5:00/km is 3.333 m/s; 2:00/100m is 0.8333 m/s.
    assert format_pace(1000 / 300, "Run") == "5:00/km"
    assert format_pace(100 / 120, "Swim") == "2:00/100m"
    assert format_pace(3.275, "Run") == "5:05/km"


def test_format_pace_carries_rounded_seconds() -> None:
    # 5:59.8/km rounds up to the next minute instead of printing 5:60.
    assert format_pace(1000 / 359.8, "Run") == "6:00/km"


def test_format_pace_without_movement() -> None:
    assert format_pace(0, "Run") is None


def test_format_speed_and_date() -> None:
    assert format_speed(5.1) == "18.4 km/h"
    assert format_date(datetime(2024, 3, 5, 7, 30)) == "March 5, 2024"


def test_format_relative() -> None:
    now = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)

    assert format_relative(now - timedelta(seconds=10), now) == "less than a minute ago"
    assert format_relative(now - timedelta(minutes=5), now) == "5 minutes ago"
    assert format_relative(now - timedelta(hours=3), now) == "about 3 hours ago"
    assert format_relative(now - timedelta(days=5), now) == "5 days ago"
    assert format_relative(now - timedelta(days=400), now) == "about 1 year ago"
    assert format_relative(now + timedelta(minutes=5), now) == "in 5 minutes"


def test_activity_type_info_falls_back_to_type_name() -> None:
    assert activity_type_info("WeightTraining").label == "Weight Training"
    assert activity_type_info("Kayaking").label == "Kayaking"
    assert activity_type_info("").label == "Activity"
