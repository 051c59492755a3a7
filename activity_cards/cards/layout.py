"""
Card layout model and the drag/snap arithmetic used by the editor.

Positions are stored as fractions of the card's width and height so a layout
renders identically at any display width or device pixel ratio. Snapping is
computed in CSS pixels against the element boxes measured by the renderer.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Literal, Mapping, Optional

from PIL import ImageColor
from pydantic import BaseModel, Field

from activity_cards.cards.catalog import (
    FONT_SIZES_BY_ID,
    FONTS_BY_ID,
    GRADIENTS_BY_ID,
    STATS_BY_ID,
)
from activity_cards.models import Activity

ASPECT_RATIO = 16 / 9
BASE_SIZE_RATIO = 0.1
SNAP_THRESHOLD_PX = 8.0
# Widest pixel buffer a card may be rendered into (1080p at 2x).
MAX_BUFFER_WIDTH = 2160

Align = Literal["left", "center", "right"]
Role = Literal["value", "label"]
Weight = Literal["bold", "medium"]


class CardLayoutError(ValueError):
    """Raised when a layout references unknown stats, fonts or backgrounds."""


class CardElement(BaseModel):
    """One piece of text on the card."""

    id: str = Field(..., min_length=1, max_length=64)
    stat_id: str
    role: Role = "value"
    text: Optional[str] = Field(
        None, description="Fixed caption for label elements; defaults to the stat label."
    )
    x: float = Field(..., ge=0.0, le=1.0)
    y: float = Field(..., ge=0.0, le=1.0)
    align: Align = "left"
    scale: float = Field(1.0, gt=0.0, le=4.0, description="Multiple of the base size.")
    size_id: str = "m"
    weight: Weight = "bold"
    color: str = "#FFFFFF"


class CardLayout(BaseModel):
    """Everything needed to redraw a card for an activity."""

    elements: list[CardElement] = Field(default_factory=list)
    font_id: str = "inter"
    gradient_id: str = "none"
    show_grid: bool = False
    grid_columns: int = Field(12, ge=2, le=48)

    def element(self, element_id: str) -> CardElement:
        for element in self.elements:
            if element.id == element_id:
                return element
        raise CardLayoutError(f"Unknown card element '{element_id}'.")


@dataclass(frozen=True)
class CanvasSize:
    """Display size of the card in CSS pixels."""

    width: float

    @property
    def height(self) -> float:
        return self.width * ASPECT_RATIO

    @property
    def base_size(self) -> float:
        return self.width * BASE_SIZE_RATIO

    def buffer_size(self, device_pixel_ratio: float) -> tuple[int, int]:
        return (
            math.floor(self.width * device_pixel_ratio + 1e-9),
            math.floor(self.height * device_pixel_ratio + 1e-9),
        )


@dataclass(frozen=True)
class ElementBox:
    """Measured bounding box of an element in CSS pixels."""

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def center_x(self) -> float:
        return (self.left + self.right) / 2

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2


@dataclass(frozen=True)
class Guide:
    """An alignment line the dragged element snapped to."""

    orientation: Literal["vertical", "horizontal"]
    position: float
    kind: Literal["center", "margin", "element", "grid"]
    source_id: Optional[str] = None


@dataclass(frozen=True)
class SnapResult:
    x: float
    y: float
    guides: tuple[Guide, ...]


def box_for_anchor(
    anchor_x: float, anchor_y: float, text_width: float, text_height: float, align: Align
) -> ElementBox:
    """Box of a text anchored like a canvas ``fillText`` with ``textBaseline=middle``."""
    if align == "center":
        left = anchor_x - text_width / 2
    elif align == "right":
        left = anchor_x - text_width
    else:
        left = anchor_x
    top = anchor_y - text_height / 2
    return ElementBox(left, top, left + text_width, top + text_height)


def _anchor_offset(align: Align, text_width: float) -> float:
    """Distance from the box's left edge to the anchor point."""
    if align == "center":
        return text_width / 2
    if align == "right":
        return text_width
    return 0.0


def _candidate_lines(
    layout: CardLayout,
    canvas: CanvasSize,
    dragged_id: str,
    boxes: Mapping[str, ElementBox],
    orientation: Literal["vertical", "horizontal"],
) -> list[Guide]:
    if orientation == "vertical":
        extent = canvas.width
    else:
        extent = canvas.height
    margin = canvas.base_size

    lines = [
        Guide(orientation, extent / 2, "center"),
        Guide(orientation, margin, "margin"),
        Guide(orientation, extent - margin, "margin"),
    ]
    for element_id, box in boxes.items():
        if element_id == dragged_id:
            continue
        if orientation == "vertical":
            edges = (box.left, box.center_x, box.right)
        else:
            edges = (box.top, box.center_y, box.bottom)
        lines.extend(Guide(orientation, edge, "element", element_id) for edge in edges)

    if layout.show_grid:
        step = canvas.width / layout.grid_columns
        position = step
        while position < extent:
            lines.append(Guide(orientation, position, "grid"))
            position += step
    return lines


def _best_snap(
    reference_points: Iterable[float], lines: Iterable[Guide], threshold: float
) -> tuple[float, Optional[Guide]]:
    """Smallest shift that aligns any reference point with any line."""
    best_delta = 0.0
    best_guide: Optional[Guide] = None
    best_distance = threshold
    points = list(reference_points)
    for guide in lines:
        for point in points:
            delta = guide.position - point
            distance = abs(delta)
            # Ties keep the earlier line and the earlier point (centres first).
            if distance < best_distance or (best_guide is None and distance <= threshold):
                best_delta, best_guide, best_distance = delta, guide, distance
    return best_delta, best_guide


def snap_position(
    layout: CardLayout,
    element_id: str,
    anchor_x: float,
    anchor_y: float,
    canvas: CanvasSize,
    boxes: Mapping[str, ElementBox],
    *,
    threshold: float = SNAP_THRESHOLD_PX,
) -> SnapResult:
    """Snap a proposed anchor position (CSS pixels) and clamp it inside the card."""
    element = layout.element(element_id)
    current = boxes.get(element_id)
    text_width = current.width if current else 0.0
    text_height = current.height if current else 0.0

    box = box_for_anchor(anchor_x, anchor_y, text_width, text_height, element.align)
    guides: list[Guide] = []

    dx, vertical = _best_snap(
        (box.center_x, box.left, box.right),
        _candidate_lines(layout, canvas, element_id, boxes, "vertical"),
        threshold,
    )
    dy, horizontal = _best_snap(
        (box.center_y, box.top, box.bottom),
        _candidate_lines(layout, canvas, element_id, boxes, "horizontal"),
        threshold,
    )
    if vertical is not None:
        guides.append(vertical)
    if horizontal is not None:
        guides.append(horizontal)

    left = box.left + dx
    top = box.top + dy
    left = min(max(left, 0.0), max(canvas.width - text_width, 0.0))
    top = min(max(top, 0.0), max(canvas.height - text_height, 0.0))

    return SnapResult(
        x=left + _anchor_offset(element.align, text_width),
        y=top + text_height / 2,
        guides=tuple(guides),
    )


def move_element(
    layout: CardLayout,
    element_id: str,
    x: float,
    y: float,
    canvas: CanvasSize,
    boxes: Mapping[str, ElementBox],
    *,
    snap: bool = True,
) -> tuple[CardLayout, tuple[Guide, ...]]:
    """Move an element to the fractional position ``(x, y)``.

    Returns the updated layout and the guides that were snapped to.
    """
    anchor_x = x * canvas.width
    anchor_y = y * canvas.height
    threshold = SNAP_THRESHOLD_PX if snap else 0.0
    result = snap_position(
        layout, element_id, anchor_x, anchor_y, canvas, boxes, threshold=threshold
    )
    if not snap:
        result = SnapResult(result.x, result.y, ())

    new_x = min(max(result.x / canvas.width, 0.0), 1.0)
    new_y = min(max(result.y / canvas.height, 0.0), 1.0)
    return (
        _replace_element(layout, element_id, x=new_x, y=new_y),
        result.guides,
    )


def _replace_element(layout: CardLayout, element_id: str, **changes) -> CardLayout:
    layout.element(element_id)
    elements = [
        element.model_copy(update=changes) if element.id == element_id else element
        for element in layout.elements
    ]
    return layout.model_copy(update={"elements": elements})


def default_layout(activity: Activity) -> CardLayout:
    """Title at the top, distance and moving time near the bottom, date below."""
    # Caption offset of 0.8 base units expressed as a fraction of card height.
    caption_offset = 0.8 * BASE_SIZE_RATIO / ASPECT_RATIO
    margin = BASE_SIZE_RATIO
    elements = [
        CardElement(id="title", stat_id="title", x=margin, y=0.06, scale=0.8),
        CardElement(id="distance", stat_id="distance", x=margin, y=0.85, scale=1.2),
        CardElement(
            id="distance-label",
            stat_id="distance",
            role="label",
            text="Distance",
            x=margin,
            y=0.85 + caption_offset,
            scale=0.5,
            weight="medium",
            color="#FFFFFFCC",
        ),
        CardElement(
            id="time", stat_id="time", x=1 - margin, y=0.85, align="right", scale=1.2
        ),
        CardElement(
            id="time-label",
            stat_id="time",
            role="label",
            text="Time",
            x=1 - margin,
            y=0.85 + caption_offset,
            align="right",
            scale=0.5,
            weight="medium",
            color="#FFFFFFCC",
        ),
        CardElement(
            id="date",
            stat_id="date",
            x=margin,
            y=0.92,
            scale=0.4,
            weight="medium",
            color="#FFFFFF99",
        ),
    ]
    if not activity.name:
        elements = [element for element in elements if element.id != "title"]
    return CardLayout(elements=elements)


def validate_layout(layout: CardLayout) -> CardLayout:
    if layout.font_id not in FONTS_BY_ID:
        raise CardLayoutError(f"Unknown font '{layout.font_id}'.")
    if layout.gradient_id not in GRADIENTS_BY_ID:
        raise CardLayoutError(f"Unknown background '{layout.gradient_id}'.")
    seen: set[str] = set()
    for element in layout.elements:
        if element.id in seen:
            raise CardLayoutError(f"Duplicate card element '{element.id}'.")
        seen.add(element.id)
        if element.stat_id not in STATS_BY_ID:
            raise CardLayoutError(f"Unknown stat '{element.stat_id}'.")
        if element.size_id not in FONT_SIZES_BY_ID:
            raise CardLayoutError(f"Unknown font size '{element.size_id}'.")
        try:
            ImageColor.getrgb(element.color)
        except ValueError as exc:
            raise CardLayoutError(
                f"Unknown colour '{element.color}' on element '{element.id}'."
            ) from exc
    return layout


def add_stat(layout: CardLayout, stat_id: str, activity: Activity) -> CardLayout:
    """Place a new stat in the middle of the card."""
    stat = STATS_BY_ID.get(stat_id)
    if stat is None:
        raise CardLayoutError(f"Unknown stat '{stat_id}'.")
    if stat.get_value(activity) is None:
        raise CardLayoutError(f"'{stat.label}' is not available for this activity.")

    existing = {element.id for element in layout.elements}
    element_id = stat_id
    suffix = 2
    while element_id in existing:
        element_id = f"{stat_id}-{suffix}"
        suffix += 1

    element = CardElement(id=element_id, stat_id=stat_id, x=0.5, y=0.5, align="center")
    return layout.model_copy(update={"elements": [*layout.elements, element]})


def remove_element(layout: CardLayout, element_id: str) -> CardLayout:
    layout.element(element_id)
    elements = [element for element in layout.elements if element.id != element_id]
    return layout.model_copy(update={"elements": elements})


def set_font(layout: CardLayout, font_id: str) -> CardLayout:
    if font_id not in FONTS_BY_ID:
        raise CardLayoutError(f"Unknown font '{font_id}'.")
    return layout.model_copy(update={"font_id": font_id})


def set_gradient(layout: CardLayout, gradient_id: str) -> CardLayout:
    if gradient_id not in GRADIENTS_BY_ID:
        raise CardLayoutError(f"Unknown background '{gradient_id}'.")
    return layout.model_copy(update={"gradient_id": gradient_id})


def set_element_size(layout: CardLayout, element_id: str, size_id: str) -> CardLayout:
    if size_id not in FONT_SIZES_BY_ID:
        raise CardLayoutError(f"Unknown font size '{size_id}'.")
    return _replace_element(layout, element_id, size_id=size_id)


__all__ = [
    "ASPECT_RATIO",
    "CanvasSize",
    "CardElement",
    "CardLayout",
    "CardLayoutError",
    "ElementBox",
    "Guide",
    "MAX_BUFFER_WIDTH",
    "SNAP_THRESHOLD_PX",
    "SnapResult",
    "add_stat",
    "box_for_anchor",
    "default_layout",
    "move_element",
    "remove_element",
    "set_element_size",
    "set_font",
    "set_gradient",
    "snap_position",
    "validate_layout",
]
