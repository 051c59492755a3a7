"""
Pydantic models for the card editor endpoints.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from activity_cards.cards.layout import MAX_BUFFER_WIDTH, CardLayout


class CardCanvas(BaseModel):
    """Display width of the editor canvas and the screen's pixel density."""

    width: float = Field(360.0, gt=0, le=2160, description="Display width in CSS pixels.")
    device_pixel_ratio: float = Field(1.0, gt=0, le=4)

    @model_validator(mode="after")
    def _limit_buffer(self) -> "CardCanvas":
        if self.width * self.device_pixel_ratio > MAX_BUFFER_WIDTH:
            raise ValueError(
                f"width * device_pixel_ratio must not exceed {MAX_BUFFER_WIDTH} pixels."
            )
        return self


class CardRenderRequest(CardCanvas):
    layout: CardLayout


class CardMoveRequest(CardCanvas):
    layout: CardLayout
    element_id: str
    x: float = Field(..., description="Proposed anchor x as a fraction of the width.")
    y: float = Field(..., description="Proposed anchor y as a fraction of the height.")
    snap: bool = True


class GuideModel(BaseModel):
    orientation: Literal["vertical", "horizontal"]
    position: float = Field(..., description="Line position in CSS pixels.")
    kind: Literal["center", "margin", "element", "grid"]
    source_id: Optional[str] = None


class ElementBoxModel(BaseModel):
    """Measured box of one element in CSS pixels, for pointer hit-testing."""

    id: str
    left: float
    top: float
    right: float
    bottom: float


class CardBoxesResponse(BaseModel):
    boxes: list[ElementBoxModel] = Field(default_factory=list)


class CardMoveResponse(CardBoxesResponse):
    layout: CardLayout
    guides: list[GuideModel] = Field(default_factory=list)


class CardEditRequest(BaseModel):
    """A single editor action applied to a layout."""

    layout: CardLayout
    action: Literal["add_stat", "remove", "font", "background", "size", "grid"]
    stat_id: Optional[str] = None
    element_id: Optional[str] = None
    value: Optional[str] = None


class OptionModel(BaseModel):
    id: str
    label: str


class StatOptionModel(OptionModel):
    value: Optional[str] = None


class CardOptionsResponse(BaseModel):
    stats: list[StatOptionModel]
    fonts: list[OptionModel]
    backgrounds: list[OptionModel]
    sizes: list[OptionModel]


__all__ = [
    "CardCanvas",
    "CardBoxesResponse",
    "CardEditRequest",
    "CardMoveRequest",
    "CardMoveResponse",
    "CardOptionsResponse",
    "CardRenderRequest",
    "ElementBoxModel",
    "GuideModel",
    "OptionModel",
    "StatOptionModel",
]
