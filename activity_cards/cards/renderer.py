"""
Pillow drawing surface for activity cards.

Mirrors an HTML canvas redraw: the buffer is ``display size * device pixel
ratio`` and every coordinate is scaled by the ratio, so exports stay sharp on
high-density screens.
"""

from __future__ import annotations

import io
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Iterable, Optional, Sequence

from PIL import Image, ImageColor, ImageDraw, ImageFont

from activity_cards.cards.catalog import (
    FONT_SIZES_BY_ID,
    FONTS_BY_ID,
    GRADIENTS_BY_ID,
    RGBA,
    STATS_BY_ID,
    FontOption,
)
from activity_cards.cards.layout import (
    MAX_BUFFER_WIDTH,
    CanvasSize,
    CardElement,
    CardLayout,
    CardLayoutError,
    ElementBox,
    box_for_anchor,
    validate_layout,
)
from activity_cards.models import Activity

logger = logging.getLogger(__name__)

DEFAULT_FONT_DIRS: tuple[Path, ...] = (
    Path("assets/fonts"),
    Path("/usr/share/fonts"),
    Path("/usr/local/share/fonts"),
    Path.home() / ".fonts",
    Path("/System/Library/Fonts"),
    Path("/Library/Fonts"),
    Path("C:/Windows/Fonts"),
)

_ANCHORS = {"left": "lm", "center": "mm", "right": "rm"}
_GRID_COLOR: RGBA = (255, 255, 255, 40)

FontType = ImageFont.FreeTypeFont | ImageFont.ImageFont


@lru_cache(maxsize=None)
def _index_font_files(font_dirs: tuple[Path, ...]) -> dict[str, Path]:
    """Map lower-cased font file names to their first location on disk."""
    index: dict[str, Path] = {}
    for directory in font_dirs:
        if not directory.is_dir():
            continue
        for path in directory.rglob("*"):
            if path.suffix.lower() in {".ttf", ".otf", ".ttc"}:
                index.setdefault(path.name.lower(), path)
    return index


def parse_color(value: str) -> RGBA:
    """Parse ``#RRGGBB``, ``#RRGGBBAA`` or any CSS colour Pillow understands."""
    color = ImageColor.getrgb(value)
    if len(color) == 3:
        return (*color, 255)
    return color  # type: ignore[return-value]


class CardRenderer:
    """Draw a card layout for an activity into an RGBA image."""

    def __init__(self, font_dirs: Sequence[Path] | None = None) -> None:
        self._font_dirs = tuple(font_dirs) if font_dirs is not None else DEFAULT_FONT_DIRS

    def element_text(self, element: CardElement, activity: Activity) -> Optional[str]:
        stat = STATS_BY_ID[element.stat_id]
        if element.role == "label":
            return element.text or stat.label
        return stat.get_value(activity)

    def font_size(
        self, element: CardElement, font: FontOption, canvas: CanvasSize
    ) -> float:
        size = FONT_SIZES_BY_ID[element.size_id].value
        return canvas.base_size * element.scale * size * font.size_adjust

    def load_font(self, font: FontOption, bold: bool, size: float) -> FontType:
        candidates = font.bold_files if bold else font.regular_files
        pixel_size = max(1, round(size))
        index = _index_font_files(self._font_dirs)
        for name in candidates:
            path = index.get(name.lower())
            if path is None:
                continue
            try:
                return ImageFont.truetype(str(path), pixel_size)
            except OSError:
                logger.warning("Unreadable font file %s", path)
                continue
        return ImageFont.load_default(size=pixel_size)

    def measure(
        self, activity: Activity, layout: CardLayout, width: float
    ) -> dict[str, ElementBox]:
        """Element boxes in CSS pixels, keyed by element id."""
        validate_layout(layout)
        canvas = CanvasSize(width)
        font = FONTS_BY_ID[layout.font_id]
        scratch = ImageDraw.Draw(Image.new("RGBA", (1, 1)))

        boxes: dict[str, ElementBox] = {}
        for element in layout.elements:
            text = self.element_text(element, activity)
            if not text:
                continue
            image_font = self.load_font(
                font, element.weight == "bold", self.font_size(element, font, canvas)
            )
            left, top, right, bottom = scratch.textbbox(
                (0, 0), text, font=image_font, anchor=_ANCHORS[element.align]
            )
            boxes[element.id] = box_for_anchor(
                element.x * canvas.width,
                element.y * canvas.height,
                right - left,
                bottom - top,
                element.align,
            )
        return boxes

    def render(
        self,
        activity: Activity,
        layout: CardLayout,
        *,
        width: float = 360,
        device_pixel_ratio: float = 1.0,
    ) -> Image.Image:
        validate_layout(layout)
        if width <= 0 or device_pixel_ratio <= 0:
            raise ValueError("Card width and device pixel ratio must be positive.")

        canvas = CanvasSize(width)
        buffer_width, buffer_height = canvas.buffer_size(device_pixel_ratio)
        if buffer_width > MAX_BUFFER_WIDTH:
            raise CardLayoutError(
                f"Card buffer of {buffer_width}px exceeds the {MAX_BUFFER_WIDTH}px limit."
            )
        image = Image.new("RGBA", (buffer_width, buffer_height), (0, 0, 0, 0))

        gradient = GRADIENTS_BY_ID[layout.gradient_id]
        if gradient.colors is not None:
            image = Image.alpha_composite(
                image, self._diagonal_gradient(image.size, *gradient.colors)
            )
        if layout.show_grid:
            image = Image.alpha_composite(
                image, self._grid(image.size, canvas, layout, device_pixel_ratio)
            )

        text_layer = Image.new("RGBA", image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(text_layer)
        font = FONTS_BY_ID[layout.font_id]
        for element in layout.elements:
            text = self.element_text(element, activity)
            if not text:
                continue
            image_font = self.load_font(
                font,
                element.weight == "bold",
                self.font_size(element, font, canvas) * device_pixel_ratio,
            )
            draw.text(
                (
                    element.x * canvas.width * device_pixel_ratio,
                    element.y * canvas.height * device_pixel_ratio,
                ),
                text,
                font=image_font,
                fill=parse_color(element.color),
                anchor=_ANCHORS[element.align],
            )
        return Image.alpha_composite(image, text_layer)

    @staticmethod
    def _diagonal_gradient(
        size: tuple[int, int], start: RGBA, end: RGBA
    ) -> Image.Image:
        """Linear gradient from the top-left corner to the bottom-right corner."""
        width, height = size
        # Projection onto the diagonal splits into independent x and y ramps.
        x_ramp = Image.linear_gradient("L").transpose(Image.Transpose.TRANSPOSE).resize(size)
        y_ramp = Image.linear_gradient("L").resize(size)
        y_weight = height * height / float(width * width + height * height)
        mask = Image.blend(x_ramp, y_ramp, y_weight)
        return Image.composite(
            Image.new("RGBA", size, end), Image.new("RGBA", size, start), mask
        )

    @staticmethod
    def _grid(
        size: tuple[int, int],
        canvas: CanvasSize,
        layout: CardLayout,
        device_pixel_ratio: float,
    ) -> Image.Image:
        overlay = Image.new("RGBA", size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        step = canvas.width / layout.grid_columns * device_pixel_ratio
        line_width = max(1, round(device_pixel_ratio))
        for position in _steps(step, size[0]):
            draw.line([(position, 0), (position, size[1])], fill=_GRID_COLOR, width=line_width)
        for position in _steps(step, size[1]):
            draw.line([(0, position), (size[0], position)], fill=_GRID_COLOR, width=line_width)
        return overlay


def _steps(step: float, extent: int) -> Iterable[float]:
    position = step
    while position < extent:
        yield position
        position += step


def to_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def export_filename(activity: Activity) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", activity.name.lower()).strip("-") or "activity"
    return f"{slug[:60].rstrip('-')}-{activity.id}.png"


__all__ = ["CardRenderer", "DEFAULT_FONT_DIRS", "export_filename", "parse_color", "to_png"]
