"""Domain models."""

from .activity import Activity, ActivityMap

__all__ = ["Activity", "ActivityMap"]
