"""Human-readable formatting for activity statistics."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def format_distance(meters: float) -> str:
    return f"{meters / 1000:.1f} km"


def format_time(seconds: int) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_speed(meters_per_second: float) -> str:
    return f"{meters_per_second * 3.6:.1f} km/h"


def format_pace(meters_per_second: float, activity_type: str = "") -> str | None:
    """Pace as ``m:ss/km``, or ``m:ss/100m`` for swims. ``None`` when stationary."""
    if not meters_per_second or meters_per_second <= 0:
        return None
    if activity_type == "Swim":
        unit_meters, suffix = 100, "/100m"
    else:
        unit_meters, suffix = 1000, "/km"

    total_minutes = unit_meters / meters_per_second / 60
    minutes = math.floor(total_minutes)
    seconds = round((total_minutes - minutes) * 60)
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}{suffix}"


def format_date(value: datetime) -> str:
    """Long date such as ``March 5, 2024``."""
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def format_relative(value: datetime, now: datetime | None = None) -> str:
    """Coarse relative time like ``3 days ago``."""
    now = now or datetime.now(timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = (now - value).total_seconds()
    future = delta < 0
    delta = abs(delta)

    if delta < 45:
        phrase = "less than a minute"
    elif delta < 90:
        phrase = "1 minute"
    elif delta < 45 * 60:
        phrase = f"{round(delta / 60)} minutes"
    elif delta < 90 * 60:
        phrase = "about 1 hour"
    elif delta < 24 * 3600:
        phrase = f"about {round(delta / 3600)} hours"
    elif delta < 42 * 3600:
        phrase = "1 day"
    elif delta < 30 * 86400:
        phrase = f"{round(delta / 86400)} days"
    elif delta < 45 * 86400:
        phrase = "about 1 month"
    elif delta < 365 * 86400:
        phrase = f"{round(delta / (30 * 86400))} months"
    else:
        years = round(delta / (365 * 86400))
        phrase = "about 1 year" if years == 1 else f"about {years} years"

    return f"in {phrase}" if future else f"{phrase} ago"


@dataclass(frozen=True)
class ActivityTypeInfo:
    label: str
    color: str


_ACTIVITY_TYPES = {
    "Ride": ActivityTypeInfo("Ride", "#3b82f6"),
    "Run": ActivityTypeInfo("Run", "#22c55e"),
    "Swim": ActivityTypeInfo("Swim", "#06b6d4"),
    "Hike": ActivityTypeInfo("Hike", "#f59e0b"),
    "WeightTraining": ActivityTypeInfo("Weight Training", "#a855f7"),
    "NordicSki": ActivityTypeInfo("Nordic Ski", "#0ea5e9"),
    "AlpineSki": ActivityTypeInfo("Alpine Ski", "#0284c7"),
    "Walk": ActivityTypeInfo("Walk", "#14b8a6"),
    "Surfing": ActivityTypeInfo("Surfing", "#6366f1"),
    "Windsurf": ActivityTypeInfo("Windsurf", "#60a5fa"),
    "Skateboard": ActivityTypeInfo("Skateboard", "#f97316"),
    "Workout": ActivityTypeInfo("Workout", "#f43f5e"),
    "Yoga": ActivityTypeInfo("Yoga", "#8b5cf6"),
    "CrossFit": ActivityTypeInfo("CrossFit", "#ef4444"),
    "RockClimbing": ActivityTypeInfo("Rock Climbing", "#78716c"),
}


def activity_type_info(activity_type: str | None) -> ActivityTypeInfo:
    info = _ACTIVITY_TYPES.get(activity_type or "")
    if info is not None:
        return info
    return ActivityTypeInfo(activity_type or "Activity", "#6b7280")


__all__ = [
    "ActivityTypeInfo",
    "activity_type_info",
    "format_date",
    "format_distance",
    "format_pace",
    "format_relative",
    "format_speed",
    "format_time",
]
