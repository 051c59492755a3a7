"""
Domain model for Strava activity records.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ActivityMap(BaseModel):
    """Route summary attached to an activity."""

    model_config = ConfigDict(extra="allow")

    summary_polyline: Optional[str] = None


class Activity(BaseModel):
    """An activity as returned by the Strava API; unknown fields are kept verbatim."""

    model_config = ConfigDict(extra="allow")

    id: int
    name: str = ""
    distance: float = 0.0
    moving_time: int = 0
    elapsed_time: int = 0
    total_elevation_gain: float = 0.0
    type: str = ""
    sport_type: Optional[str] = None
    start_date: datetime
    start_date_local: Optional[datetime] = None
    map: ActivityMap = Field(default_factory=ActivityMap)
    average_speed: float = 0.0
    max_speed: float = 0.0
    average_watts: Optional[float] = None
    kilojoules: Optional[float] = None
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    average_cadence: Optional[float] = None
    calories: Optional[float] = None
    description: Optional[str] = None


__all__ = ["Activity", "ActivityMap"]
