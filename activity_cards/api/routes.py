"""
FastAPI JSON routes: Strava sign-in, activity data and the card editor.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Annotated, Any, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, RedirectResponse

from activity_cards.cards import (
    AVAILABLE_STATS,
    FONT_SIZES,
    FONTS,
    GRADIENTS,
    CanvasSize,
    CardLayout,
    CardLayoutError,
    ElementBox,
    add_stat,
    default_layout,
    export_filename,
    move_element,
    remove_element,
    set_element_size,
    set_font,
    set_gradient,
    to_png,
    validate_layout,
)
from activity_cards.clients.strava_auth import (
    InvalidSignatureError,
    OAuthTokenExchangeError,
)
from activity_cards.dependencies import (
    get_activity_service,
    get_app_settings,
    get_card_renderer,
    get_oauth_settings,
    get_session_manager,
    get_signed_payload_encoder,
    get_strava_oauth_client,
    get_strava_token_service,
    require_user_id,
)
from activity_cards.models import Activity
from activity_cards.schemas import (
    ActivityListResponse,
    ActivitySummary,
    AthleteProfile,
    CardBoxesResponse,
    CardEditRequest,
    CardMoveRequest,
    CardMoveResponse,
    CardOptionsResponse,
    CardRenderRequest,
    ElementBoxModel,
    GuideModel,
    OAuthCallbackPayload,
    OptionModel,
    StatOptionModel,
)

router = APIRouter()
logger = logging.getLogger(__name__)

_ACTIVITY_SCOPES = {"activity:read", "activity:read_all"}
_STATE_KIND = "oauth_state"


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "").lower()


def _safe_redirect_target(value: Optional[str]) -> Optional[str]:
    """Only same-site relative paths are honoured as post-login targets."""
    if value and value.startswith("/") and not value.startswith("//"):
        return value
    return None


@router.get("/health", status_code=HTTPStatus.OK)
async def healthcheck() -> dict:
    """Simple health endpoint for monitoring."""
    return {"status": "ok"}


@router.get("/auth/strava/authorize", status_code=HTTPStatus.OK)
async def start_strava_oauth_flow(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_strava_oauth_client)],
    state_encoder: Annotated[Any, Depends(get_signed_payload_encoder)],
    redirect_to: str | None = Query(
        default=None,
        description="Optional path to return to once the athlete is signed in.",
    ),
    redirect: bool = Query(
        default=False,
        description="When true, respond with a redirect to the Strava consent screen.",
    ),
):
    """
    Kick off the OAuth flow by generating a state token and authorization URL.
    """
    state_payload = {
        "kind": _STATE_KIND,
        "nonce": uuid.uuid4().hex,
        "redirect_to": _safe_redirect_target(redirect_to),
        "issued_at": datetime.now(timezone.utc).isoformat(),
    }
    state = state_encoder.encode(state_payload)
    authorization_url = oauth_client.build_authorization_url(state=state)

    if redirect or _wants_html(request):
        return RedirectResponse(url=authorization_url, status_code=HTTPStatus.TEMPORARY_REDIRECT)

    return {"authorization_url": authorization_url, "state": state}


def _validate_state(state_encoder: Any, state: str, ttl_seconds: int) -> dict:
    try:
        state_data = state_encoder.decode(state)
    except InvalidSignatureError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Invalid OAuth state signature.",
        ) from exc

    if state_data.get("kind") != _STATE_KIND:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="Token is not an OAuth state."
        )

    issued_at_raw = state_data.get("issued_at")
    if not issued_at_raw:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Missing issued_at in state token.",
        )
    try:
        issued_at = datetime.fromisoformat(issued_at_raw)
    except ValueError as exc:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Invalid issued_at in state token.",
        ) from exc
    if issued_at.tzinfo is None:
        issued_at = issued_at.replace(tzinfo=timezone.utc)

    if datetime.now(timezone.utc) - issued_at > timedelta(seconds=ttl_seconds):
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST, detail="OAuth state token has expired."
        )
    return state_data


@router.get("/auth/strava/callback", status_code=HTTPStatus.OK)
async def handle_strava_oauth_callback(
    request: Request,
    oauth_client: Annotated[Any, Depends(get_strava_oauth_client)],
    state_encoder: Annotated[Any, Depends(get_signed_payload_encoder)],
    token_service: Annotated[Any, Depends(get_strava_token_service)],
    sessions: Annotated[Any, Depends(get_session_manager)],
    settings: Annotated[Any, Depends(get_app_settings)],
    oauth_settings: Annotated[Any, Depends(get_oauth_settings)],
    state: str = Query(..., description="OAuth state token."),
    code: str | None = Query(default=None, description="Authorization code from Strava."),
    scope: str | None = Query(default=None, description="Scopes granted by the athlete."),
    error: str | None = Query(default=None, description="Set when access was denied."),
) -> Response:
    """Complete the OAuth exchange, store tokens and start a session."""
    payload = OAuthCallbackPayload(state=state, code=code, scope=scope, error=error)
    state_data = _validate_state(
        state_encoder, payload.state, oauth_settings.state_ttl_seconds
    )

    if payload.error or not payload.code:
        logger.info("Strava authorization was not granted: %s", payload.error)
        if _wants_html(request):
            return RedirectResponse(
                url="/?error=access_denied", status_code=HTTPStatus.SEE_OTHER
            )
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Strava authorization was not granted.",
        )

    granted = {item.strip() for item in (payload.scope or "").split(",") if item.strip()}
    if payload.scope is not None and not granted & _ACTIVITY_SCOPES:
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Activity access is required to build cards.",
        )

    try:
        bundle = await oauth_client.exchange_authorization_code(payload.code)
    except (OAuthTokenExchangeError, httpx.HTTPError) as exc:
        logger.warning("Strava code exchange failed: %s", exc)
        if _wants_html(request):
            return RedirectResponse(
                url="/?error=exchange_failed", status_code=HTTPStatus.SEE_OTHER
            )
        raise HTTPException(
            status_code=HTTPStatus.BAD_REQUEST,
            detail="Failed to exchange authorization code.",
        ) from exc

    user_id = bundle.athlete_id
    token_service.store_tokens(user_id, bundle, scope=payload.scope)
    logger.info("Connected Strava athlete %s", user_id)

    redirect_target = state_data.get("redirect_to") or "/dashboard"
    if _wants_html(request):
        response: Response = RedirectResponse(
            url=redirect_target, status_code=HTTPStatus.SEE_OTHER
        )
    else:
        response = JSONResponse(
            content={
                "status": "connected",
                "user_id": user_id,
                "redirect_to": redirect_target,
            }
        )
    response.set_cookie(
        settings.session_cookie_name,
        sessions.issue(user_id),
        max_age=sessions.ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.is_production,
    )
    return response


@router.post("/auth/logout", status_code=HTTPStatus.OK)
async def logout(settings: Annotated[Any, Depends(get_app_settings)]) -> Response:
    response = JSONResponse(content={"status": "signed_out"})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.post("/auth/strava/disconnect", status_code=HTTPStatus.OK)
async def disconnect_strava(
    user_id: Annotated[str, Depends(require_user_id)],
    token_service: Annotated[Any, Depends(get_strava_token_service)],
    settings: Annotated[Any, Depends(get_app_settings)],
) -> Response:
    """Revoke Strava access, forget stored tokens and end the session."""
    await token_service.revoke(user_id)
    response = JSONResponse(content={"status": "disconnected"})
    response.delete_cookie(settings.session_cookie_name)
    return response


@router.get("/me", response_model=AthleteProfile)
async def current_athlete(
    user_id: Annotated[str, Depends(require_user_id)],
    token_service: Annotated[Any, Depends(get_strava_token_service)],
) -> AthleteProfile:
    athlete = token_service.get_athlete(user_id)
    if athlete is None:
        raise HTTPException(
            status_code=HTTPStatus.UNAUTHORIZED, detail="Strava account not connected."
        )
    return AthleteProfile(
        user_id=user_id,
        firstname=athlete.get("firstname"),
        lastname=athlete.get("lastname"),
        profile=athlete.get("profile"),
    )


@router.get("/activities", response_model=ActivityListResponse)
async def list_activities(
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    page: int = Query(default=1, ge=1, le=100),
    refresh: bool = Query(default=False, description="Bypass the activity cache."),
) -> ActivityListResponse:
    activities = await activity_service.list_recent(
        user_id, page=page, force_refresh=refresh
    )
    return ActivityListResponse(
        page=page,
        activities=[ActivitySummary.from_activity(activity) for activity in activities],
    )


async def _load_activity(activity_service: Any, user_id: str, activity_id: int) -> Activity:
    activity = await activity_service.get_activity(user_id, activity_id)
    if activity is None:
        raise HTTPException(status_code=HTTPStatus.NOT_FOUND, detail="Activity not found.")
    return activity


@router.get("/activities/{activity_id}")
async def get_activity(
    activity_id: int,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
) -> dict:
    activity = await _load_activity(activity_service, user_id, activity_id)
    return activity.model_dump(mode="json")


def card_options(activity: Activity) -> CardOptionsResponse:
    """Pickers for the editor; only stats with a value for ``activity`` are offered."""
    stats = []
    for stat in AVAILABLE_STATS:
        value = stat.get_value(activity)
        if value is not None:
            stats.append(StatOptionModel(id=stat.id, label=stat.label, value=value))
    return CardOptionsResponse(
        stats=stats,
        fonts=[OptionModel(id=font.id, label=font.name) for font in FONTS],
        backgrounds=[
            OptionModel(id=gradient.id, label=gradient.name) for gradient in GRADIENTS
        ],
        sizes=[OptionModel(id=size.id, label=size.label) for size in FONT_SIZES],
    )


@router.get("/activities/{activity_id}/card/options", response_model=CardOptionsResponse)
async def get_card_options(
    activity_id: int,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
) -> CardOptionsResponse:
    activity = await _load_activity(activity_service, user_id, activity_id)
    return card_options(activity)


@router.get("/activities/{activity_id}/card/layout", response_model=CardLayout)
async def get_default_card_layout(
    activity_id: int,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
) -> CardLayout:
    activity = await _load_activity(activity_service, user_id, activity_id)
    return default_layout(activity)


def _unprocessable(exc: CardLayoutError) -> HTTPException:
    return HTTPException(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, detail=str(exc))


def _box_models(boxes: dict[str, ElementBox]) -> list[ElementBoxModel]:
    return [
        ElementBoxModel(
            id=element_id, left=box.left, top=box.top, right=box.right, bottom=box.bottom
        )
        for element_id, box in boxes.items()
    ]


@router.post("/activities/{activity_id}/card/boxes", response_model=CardBoxesResponse)
async def measure_card_elements(
    activity_id: int,
    payload: CardRenderRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    renderer: Annotated[Any, Depends(get_card_renderer)],
) -> CardBoxesResponse:
    """Element boxes at the editor's display width, topmost element last."""
    activity = await _load_activity(activity_service, user_id, activity_id)
    try:
        boxes = renderer.measure(activity, payload.layout, payload.width)
    except CardLayoutError as exc:
        raise _unprocessable(exc) from exc
    return CardBoxesResponse(boxes=_box_models(boxes))


@router.post("/activities/{activity_id}/card/move", response_model=CardMoveResponse)
async def move_card_element(
    activity_id: int,
    payload: CardMoveRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    renderer: Annotated[Any, Depends(get_card_renderer)],
) -> CardMoveResponse:
    """Move one element, snapping it to nearby guides."""
    activity = await _load_activity(activity_service, user_id, activity_id)
    try:
        boxes = renderer.measure(activity, payload.layout, payload.width)
        layout, guides = move_element(
            payload.layout,
            payload.element_id,
            payload.x,
            payload.y,
            CanvasSize(payload.width),
            boxes,
            snap=payload.snap,
        )
        moved_boxes = renderer.measure(activity, layout, payload.width)
    except CardLayoutError as exc:
        raise _unprocessable(exc) from exc

    return CardMoveResponse(
        layout=layout,
        boxes=_box_models(moved_boxes),
        guides=[
            GuideModel(
                orientation=guide.orientation,
                position=guide.position,
                kind=guide.kind,
                source_id=guide.source_id,
            )
            for guide in guides
        ],
    )


def apply_card_edit(payload: CardEditRequest, activity: Activity) -> CardLayout:
    layout = payload.layout
    if payload.action == "add_stat":
        return add_stat(layout, payload.stat_id or "", activity)
    if payload.action == "remove":
        return remove_element(layout, payload.element_id or "")
    if payload.action == "font":
        return set_font(layout, payload.value or "")
    if payload.action == "background":
        return set_gradient(layout, payload.value or "")
    if payload.action == "size":
        return set_element_size(layout, payload.element_id or "", payload.value or "")
    return layout.model_copy(update={"show_grid": not layout.show_grid})


@router.post("/activities/{activity_id}/card/edit", response_model=CardLayout)
async def edit_card_layout(
    activity_id: int,
    payload: CardEditRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
) -> CardLayout:
    activity = await _load_activity(activity_service, user_id, activity_id)
    try:
        return validate_layout(apply_card_edit(payload, activity))
    except CardLayoutError as exc:
        raise _unprocessable(exc) from exc


async def _render_png(renderer: Any, activity: Activity, payload: CardRenderRequest) -> bytes:
    try:
        image = await run_in_threadpool(
            renderer.render,
            activity,
            payload.layout,
            width=payload.width,
            device_pixel_ratio=payload.device_pixel_ratio,
        )
    except CardLayoutError as exc:
        raise _unprocessable(exc) from exc
    return await run_in_threadpool(to_png, image)


@router.post("/activities/{activity_id}/card/render")
async def render_card(
    activity_id: int,
    payload: CardRenderRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    renderer: Annotated[Any, Depends(get_card_renderer)],
) -> Response:
    """Redraw the card for the editor preview."""
    activity = await _load_activity(activity_service, user_id, activity_id)
    png = await _render_png(renderer, activity, payload)
    return Response(content=png, media_type="image/png", headers={"Cache-Control": "no-store"})


@router.post("/activities/{activity_id}/card/export")
async def export_card(
    activity_id: int,
    payload: CardRenderRequest,
    user_id: Annotated[str, Depends(require_user_id)],
    activity_service: Annotated[Any, Depends(get_activity_service)],
    renderer: Annotated[Any, Depends(get_card_renderer)],
) -> Response:
    """Return the finished card as a downloadable PNG."""
    activity = await _load_activity(activity_service, user_id, activity_id)
    png = await _render_png(renderer, activity, payload)
    filename = export_filename(activity)
    logger.info("Exported card for activity %s (%d bytes)", activity_id, len(png))
    return Response(
        content=png,
        media_type="image/png",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


__all__ = ["apply_card_edit", "card_options", "router"]
