"""Pytest configuration shared across the suite."""

try:
    from . import _bootstrap  # noqa: F401
except Exception:  # pragma: no cover
    import _bootstrap  # type: ignore # noqa: F401

import pytest

from activity_cards.models import Activity


@pytest.fixture
def anyio_backend() -> str:
    """Force AnyIO-powered tests to run against asyncio backend only."""
    return "asyncio"


def make_activity_payload(**overrides) -> dict:
    payload = {
        "id": 987654321,
        "name": "Morning Run",
        "distance": 10234.5,
        "moving_time": 3125,
        "elapsed_time": 3300,
        "total_elevation_gain": 87.4,
        "type": "Run",
        "sport_type": "Run",
        "start_date": "2024-03-05T06:30:00Z",
        "start_date_local": "2024-03-05T07:30:00Z",
        "map": {"summary_polyline": "abc"},
        "average_speed": 3.275,
        "max_speed": 5.1,
        "average_heartrate": 151.6,
        "max_heartrate": 178.0,
        "kudos_count": 4,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def activity_payload() -> dict:
    return make_activity_payload()


@pytest.fixture
def activity(activity_payload: dict) -> Activity:
    return Activity.model_validate(activity_payload)
