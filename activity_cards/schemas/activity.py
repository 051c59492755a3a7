"""
Response models for activity listings.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from activity_cards.models import Activity
from activity_cards.utils.formatting import (
    activity_type_info,
    format_distance,
    format_relative,
    format_time,
)


class ActivitySummary(BaseModel):
    """Pre-formatted fields for one entry in the activity list."""

    id: int
    name: str
    type: str
    type_label: str
    type_color: str
    start_date: datetime
    started: str = Field(..., description="Relative start time, e.g. '3 days ago'.")
    distance: str
    moving_time: str
    elevation: str
    average_power: Optional[str] = None

    @classmethod
    def from_activity(
        cls, activity: Activity, *, now: Optional[datetime] = None
    ) -> "ActivitySummary":
        info = activity_type_info(activity.type)
        return cls(
            id=activity.id,
            name=activity.name,
            type=activity.type,
            type_label=info.label,
            type_color=info.color,
            start_date=activity.start_date,
            started=format_relative(activity.start_date, now),
            distance=format_distance(activity.distance),
            moving_time=format_time(activity.moving_time),
            elevation=f"{activity.total_elevation_gain:.1f}m",
            average_power=(
                f"{activity.average_watts:g}W" if activity.average_watts else None
            ),
        )


class ActivityListResponse(BaseModel):
    page: int
    activities: list[ActivitySummary] = Field(default_factory=list)


__all__ = ["ActivityListResponse", "ActivitySummary"]
