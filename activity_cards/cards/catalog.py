"""
Catalogue of the stats, fonts, backgrounds and text sizes a card can use.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from activity_cards.models import Activity
from activity_cards.utils.formatting import (
    format_date,
    format_distance,
    format_pace,
    format_speed,
    format_time,
)

BRAND_COLOR = "#FC4C02"

RGBA = tuple[int, int, int, int]


@dataclass(frozen=True)
class StatOption:
    id: str
    label: str
    get_value: Callable[[Activity], Optional[str]]


def _rounded(value: Optional[float], unit: str) -> Optional[str]:
    if not value:
        return None
    return f"{round(value)}{unit}"


def _calories(activity: Activity) -> Optional[str]:
    if not activity.calories:
        return None
    calories = activity.calories
    if float(calories).is_integer():
        calories = int(calories)
    return f"{calories} cal"


AVAILABLE_STATS: tuple[StatOption, ...] = (
    StatOption("title", "Title", lambda a: a.name or None),
    StatOption("distance", "Distance", lambda a: format_distance(a.distance)),
    StatOption("time", "Moving Time", lambda a: format_time(a.moving_time)),
    StatOption("avg_power", "Avg Power", lambda a: _rounded(a.average_watts, "W")),
    StatOption("avg_hr", "Avg Heart Rate", lambda a: _rounded(a.average_heartrate, " bpm")),
    StatOption("max_hr", "Max HR", lambda a: _rounded(a.max_heartrate, " bpm")),
    StatOption("avg_cadence", "Avg Cadence", lambda a: _rounded(a.average_cadence, " rpm")),
    StatOption("date", "Date", lambda a: format_date(a.start_date_local or a.start_date)),
    StatOption("max_speed", "Max Speed", lambda a: format_speed(a.max_speed)),
    StatOption("avg_speed", "Avg Speed", lambda a: format_speed(a.average_speed)),
    StatOption("pace", "Pace", lambda a: format_pace(a.average_speed, a.type)),
    StatOption("calories", "Calories", _calories),
    StatOption(
        "total_elevation",
        "Total Elevation",
        lambda a: f"{round(a.total_elevation_gain)}m",
    ),
)


@dataclass(frozen=True)
class FontOption:
    id: str
    name: str
    size_adjust: float
    # Candidate TrueType files, regular then bold.
    regular_files: tuple[str, ...]
    bold_files: tuple[str, ...]


_FALLBACK_REGULAR = ("DejaVuSans.ttf", "Arial.ttf", "arial.ttf")
_FALLBACK_BOLD = ("DejaVuSans-Bold.ttf", "Arial Bold.ttf", "arialbd.ttf")

FONTS: tuple[FontOption, ...] = (
    FontOption(
        "inter", "Inter", 1.0,
        ("Inter-Regular.ttf", "Inter.ttf") + _FALLBACK_REGULAR,
        ("Inter-Bold.ttf", "Inter.ttf") + _FALLBACK_BOLD,
    ),
    FontOption("system", "System", 1.0, _FALLBACK_REGULAR, _FALLBACK_BOLD),
    FontOption(
        "geist", "Geist", 1.0,
        ("Geist-Regular.ttf",) + _FALLBACK_REGULAR,
        ("Geist-Bold.ttf",) + _FALLBACK_BOLD,
    ),
    FontOption(
        "geist-mono", "Geist Mono", 0.95,
        ("GeistMono-Regular.ttf", "DejaVuSansMono.ttf") + _FALLBACK_REGULAR,
        ("GeistMono-Bold.ttf", "DejaVuSansMono-Bold.ttf") + _FALLBACK_BOLD,
    ),
    FontOption(
        "roboto", "Roboto", 1.1,
        ("Roboto-Regular.ttf",) + _FALLBACK_REGULAR,
        ("Roboto-Bold.ttf",) + _FALLBACK_BOLD,
    ),
    FontOption(
        "montserrat", "Montserrat", 1.05,
        ("Montserrat-Regular.ttf",) + _FALLBACK_REGULAR,
        ("Montserrat-Bold.ttf",) + _FALLBACK_BOLD,
    ),
)


@dataclass(frozen=True)
class GradientOption:
    id: str
    name: str
    colors: Optional[tuple[RGBA, RGBA]]


def _rgba(red: int, green: int, blue: int, alpha: float) -> RGBA:
    return (red, green, blue, round(alpha * 255))


GRADIENTS: tuple[GradientOption, ...] = (
    GradientOption("none", "Transparent", None),
    GradientOption("midnight", "Midnight Blue", (_rgba(30, 58, 138, 0.05), _rgba(59, 130, 246, 0.15))),
    GradientOption("sunset", "Sunset", (_rgba(121, 40, 202, 0.05), _rgba(255, 0, 128, 0.15))),
    GradientOption("forest", "Forest", (_rgba(6, 78, 59, 0.05), _rgba(5, 150, 105, 0.15))),
    GradientOption("twilight", "Twilight", (_rgba(49, 46, 129, 0.05), _rgba(129, 140, 248, 0.15))),
    GradientOption("ember", "Ember", (_rgba(24, 24, 27, 0.05), _rgba(220, 38, 38, 0.15))),
)


@dataclass(frozen=True)
class FontSizeOption:
    id: str
    label: str
    value: float


FONT_SIZES: tuple[FontSizeOption, ...] = (
    FontSizeOption("xs", "XS", 0.6),
    FontSizeOption("s", "S", 0.8),
    FontSizeOption("m", "M", 1.0),
    FontSizeOption("l", "L", 1.2),
    FontSizeOption("xl", "XL", 1.4),
)

STATS_BY_ID = {stat.id: stat for stat in AVAILABLE_STATS}
FONTS_BY_ID = {font.id: font for font in FONTS}
GRADIENTS_BY_ID = {gradient.id: gradient for gradient in GRADIENTS}
FONT_SIZES_BY_ID = {size.id: size for size in FONT_SIZES}


def stat_value(stat_id: str, activity: Activity) -> Optional[str]:
    stat = STATS_BY_ID.get(stat_id)
    if stat is None:
        return None
    return stat.get_value(activity)


def available_stats_for(activity: Activity) -> list[StatOption]:
    """Stats that have a value for this activity and can therefore be placed."""
    return [stat for stat in AVAILABLE_STATS if stat.get_value(activity) is not None]


__all__ = [
    "AVAILABLE_STATS",
    "BRAND_COLOR",
    "FONTS",
    "FONTS_BY_ID",
    "FONT_SIZES",
    "FONT_SIZES_BY_ID",
    "FontOption",
    "FontSizeOption",
    "GRADIENTS",
    "GRADIENTS_BY_ID",
    "GradientOption",
    "STATS_BY_ID",
    "StatOption",
    "available_stats_for",
    "stat_value",
]
