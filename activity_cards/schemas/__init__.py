"""Public schema exports."""

from .activity import ActivityListResponse, ActivitySummary
from .auth import AthleteProfile, OAuthCallbackPayload
from .card import (
    CardBoxesResponse,
    CardCanvas,
    CardEditRequest,
    CardMoveRequest,
    CardMoveResponse,
    CardOptionsResponse,
    CardRenderRequest,
    ElementBoxModel,
    GuideModel,
    OptionModel,
    StatOptionModel,
)

__all__ = [
    "ActivityListResponse",
    "ActivitySummary",
    "AthleteProfile",
    "CardBoxesResponse",
    "CardCanvas",
    "CardEditRequest",
    "CardMoveRequest",
    "CardMoveResponse",
    "CardOptionsResponse",
    "CardRenderRequest",
    "GuideModel",
    "ElementBoxModel",
    "OAuthCallbackPayload",
    "OptionModel",
    "StatOptionModel",
]
