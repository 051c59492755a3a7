"""Shareable activity cards: catalogue, layout arithmetic and rendering."""

from .catalog import (
    AVAILABLE_STATS,
    BRAND_COLOR,
    FONT_SIZES,
    FONTS,
    GRADIENTS,
    available_stats_for,
    stat_value,
)
from .layout import (
    MAX_BUFFER_WIDTH,
    CanvasSize,
    CardElement,
    CardLayout,
    CardLayoutError,
    ElementBox,
    Guide,
    add_stat,
    default_layout,
    move_element,
    remove_element,
    set_element_size,
    set_font,
    set_gradient,
    snap_position,
    validate_layout,
)
from .renderer import CardRenderer, export_filename, to_png

__all__ = [
    "AVAILABLE_STATS",
    "BRAND_COLOR",
    "CanvasSize",
    "CardElement",
    "CardLayout",
    "CardLayoutError",
    "CardRenderer",
    "ElementBox",
    "FONTS",
    "FONT_SIZES",
    "GRADIENTS",
    "Guide",
    "MAX_BUFFER_WIDTH",
    "add_stat",
    "available_stats_for",
    "default_layout",
    "export_filename",
    "move_element",
    "remove_element",
    "set_element_size",
    "set_font",
    "set_gradient",
    "snap_position",
    "stat_value",
    "to_png",
    "validate_layout",
]
