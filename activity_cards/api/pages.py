"""
Server-rendered pages: landing, activity dashboard and card editor.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from pathlib import Path
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from activity_cards.api.routes import card_options
from activity_cards.cards import BRAND_COLOR, default_layout
from activity_cards.dependencies import (
    get_activity_service,
    get_app_settings,
    get_strava_token_service,
    optional_user_id,
)
from activity_cards.schemas import ActivitySummary, AthleteProfile

router = APIRouter()
logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.globals["brand_color"] = BRAND_COLOR


def _athlete_profile(token_service: Any, user_id: str) -> AthleteProfile:
    athlete = token_service.get_athlete(user_id) or {}
    return AthleteProfile(
        user_id=user_id,
        firstname=athlete.get("firstname"),
        lastname=athlete.get("lastname"),
        profile=athlete.get("profile"),
    )


@router.get("/", response_class=HTMLResponse)
async def landing_page(
    request: Request,
    user_id: Annotated[Optional[str], Depends(optional_user_id)],
    error: Optional[str] = None,
) -> Response:
    return templates.TemplateResponse(
        request,
        "index.html",
        {"signed_in": user_id is not None, "error": error},
    )


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(
    request: Request,
    user_id: Annotated[Optional[str], Depends(optional_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    token_service: Annotated[Any, Depends(get_strava_token_service)],
) -> Response:
    if user_id is None:
        return RedirectResponse(url="/", status_code=HTTPStatus.SEE_OTHER)

    activities = await activity_service.list_recent(user_id)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "athlete": _athlete_profile(token_service, user_id),
            "activities": [ActivitySummary.from_activity(a) for a in activities],
        },
    )


@router.get("/dashboard/activities/{activity_id}", response_class=HTMLResponse)
async def activity_editor_page(
    request: Request,
    activity_id: int,
    user_id: Annotated[Optional[str], Depends(optional_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
) -> Response:
    if user_id is None:
        return RedirectResponse(url="/", status_code=HTTPStatus.SEE_OTHER)

    activity = await activity_service.get_activity(user_id, activity_id)
    if activity is None:
        return RedirectResponse(url="/dashboard", status_code=HTTPStatus.SEE_OTHER)

    return templates.TemplateResponse(
        request,
        "editor.html",
        {
            "activity": ActivitySummary.from_activity(activity),
            "layout": default_layout(activity).model_dump(mode="json"),
            "options": card_options(activity).model_dump(mode="json"),
        },
    )


@router.get("/logout")
async def logout_page(settings: Annotated[Any, Depends(get_app_settings)]) -> Response:
    response = RedirectResponse(url="/", status_code=HTTPStatus.SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name)
    return response


__all__ = ["router", "templates"]
