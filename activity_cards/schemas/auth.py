"""Schemas related to OAuth flows."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class OAuthCallbackPayload(BaseModel):
    """Query parameters Strava appends when redirecting back after consent."""

    code: Optional[str] = Field(None, description="Authorization code returned by Strava.")
    state: str = Field(..., description="Opaque state token issued when starting OAuth.")
    scope: Optional[str] = Field(None, description="Comma-separated scopes the athlete granted.")
    error: Optional[str] = Field(None, description="Set when the athlete denied access.")


class AthleteProfile(BaseModel):
    """Public subset of the Strava athlete profile shown in the header."""

    user_id: str
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    profile: Optional[str] = Field(None, description="Profile picture URL.")

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.firstname, self.lastname) if part)
        return name or "Athlete"


__all__ = ["AthleteProfile", "OAuthCallbackPayload"]
