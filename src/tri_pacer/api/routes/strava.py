"""Strava OAuth and activity API routes.

Credentials live in the token store keyed by Strava athlete id.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..deps import (
    StravaClientFactory,
    get_optional_strava_oauth_flow,
    get_strava_client_factory,
    get_strava_oauth_flow,
    get_tokens,
)
from ..exception_handlers import integration_error_to_api_error
from ...config import get_settings
from ...exceptions import StravaAuthError, StravaNotConnectedError, ValidationError
from ...integrations.base import IntegrationError, OAuthCredentials
from ...integrations.strava import StravaActivity, StravaOAuthFlow
from ...services.token_store import TokenStore


logger = logging.getLogger(__name__)


router = APIRouter()


# =============================================================================
# Pydantic Models
# =============================================================================


class StravaAuthResponse(BaseModel):
    """Response containing Strava OAuth authorization URL."""
    authorization_url: str
    state: str


class StravaCallbackRequest(BaseModel):
    """Request body for the OAuth callback."""
    code: str = Field(..., min_length=1)
    state: str = Field(..., min_length=1, description="State issued by /auth")


class StravaCallbackResponse(BaseModel):
    """Response from OAuth callback."""
    success: bool
    athlete_id: str
    athlete_name: Optional[str] = None
    scope: Optional[str] = None


class StravaTokenRequest(BaseModel):
    """A token obtained by the client, stored for an athlete."""
    athlete_id: str = Field(..., min_length=1)
    access_token: str = Field(..., min_length=1)
    refresh_token: Optional[str] = None
    expires_at: Optional[int] = Field(None, description="Unix timestamp")


class StravaLogoutRequest(BaseModel):
    athlete_id: str


class MessageResponse(BaseModel):
    message: str


class TokenExistsResponse(BaseModel):
    exists: bool


class StravaActivitiesResponse(BaseModel):
    athlete_id: str
    count: int
    activities: List[dict]


# =============================================================================
# Helper Functions
# =============================================================================


async def load_recent_activities(
    athlete_id: str,
    tokens: TokenStore,
    oauth_flow: Optional[StravaOAuthFlow],
    client_factory: StravaClientFactory,
    weeks: Optional[int] = None,
) -> List[StravaActivity]:
    """
    Fetch an athlete's recent Swim/Ride/Run activities.

    Refreshes and re-stores an expired token when a refresh token and OAuth
    configuration are available.

    Raises:
        StravaNotConnectedError: If no token is stored for the athlete
        TriPacerError: Translated Strava failures
    """
    settings = get_settings()
    credentials = tokens.get_token(athlete_id)
    if credentials is None:
        raise StravaNotConnectedError(athlete_id)

    try:
        if credentials.needs_refresh and oauth_flow is not None:
            credentials = await oauth_flow.refresh_token(credentials)
            tokens.set_token(athlete_id, credentials)
            logger.info(f"Refreshed Strava token for athlete {athlete_id}")

        async with client_factory(credentials) as client:
            return await client.get_recent_triathlon_activities(
                weeks=weeks or settings.activity_lookback_weeks,
                limit=settings.activity_page_size,
            )
    except IntegrationError as e:
        logger.error(f"Failed to fetch Strava activities for athlete {athlete_id}: {e}")
        raise integration_error_to_api_error(e) from e


# =============================================================================
# API Routes
# =============================================================================


@router.get("/auth", response_model=StravaAuthResponse)
async def get_strava_auth_url(
    oauth_flow: StravaOAuthFlow = Depends(get_strava_oauth_flow),
):
    """
    Get Strava OAuth authorization URL.

    Returns the URL to redirect the athlete to for authorization, with
    scope read,activity:read_all.
    """
    state = oauth_flow.generate_state()
    auth_url = oauth_flow.get_authorization_url(state)
    return StravaAuthResponse(authorization_url=auth_url, state=state)


@router.post("/callback", response_model=StravaCallbackResponse)
async def handle_strava_callback(
    request: StravaCallbackRequest,
    oauth_flow: StravaOAuthFlow = Depends(get_strava_oauth_flow),
    tokens: TokenStore = Depends(get_tokens),
):
    """
    Handle Strava OAuth callback.

    Exchanges the authorization code for tokens and stores them under the
    athlete id Strava returns. The state must be one issued by /auth and
    not yet used.
    """
    if not oauth_flow.validate_state(request.state):
        logger.warning(f"[handle_strava_callback] Invalid OAuth state: {request.state[:8]}...")
        raise ValidationError("Invalid or expired OAuth state. Please try connecting again.", field="state")

    try:
        credentials = await oauth_flow.exchange_code(request.code)
    except IntegrationError as e:
        logger.error(f"[handle_strava_callback] Token exchange failed: {e}")
        raise integration_error_to_api_error(e) from e

    if not credentials.user_id:
        raise StravaAuthError("Strava did not return an athlete id")

    tokens.set_token(credentials.user_id, credentials)

    return StravaCallbackResponse(
        success=True,
        athlete_id=credentials.user_id,
        athlete_name=credentials.user_name,
        scope=credentials.scope,
    )


@router.post("/token", response_model=MessageResponse)
async def save_token(
    request: StravaTokenRequest,
    tokens: TokenStore = Depends(get_tokens),
):
    """Store a Strava token the client obtained itself."""
    credentials = OAuthCredentials(
        provider="strava",
        access_token=request.access_token,
        refresh_token=request.refresh_token,
        expires_at=datetime.fromtimestamp(request.expires_at) if request.expires_at else None,
        user_id=request.athlete_id,
    )
    tokens.set_token(request.athlete_id, credentials)
    return MessageResponse(message="saved")


@router.get(
    "/token/{athlete_id}",
    response_model=TokenExistsResponse,
    responses={404: {"model": TokenExistsResponse}},
)
async def token_exists(
    athlete_id: str,
    tokens: TokenStore = Depends(get_tokens),
):
    """Check whether a token is stored for the athlete (404 when absent)."""
    if not tokens.has_token(athlete_id):
        return JSONResponse(status_code=404, content={"exists": False})
    return TokenExistsResponse(exists=True)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: StravaLogoutRequest,
    tokens: TokenStore = Depends(get_tokens),
):
    """Delete the athlete's stored token."""
    tokens.delete_token(request.athlete_id)
    return MessageResponse(message="Logged out")


@router.get("/activities/{athlete_id}", response_model=StravaActivitiesResponse)
async def get_activities(
    athlete_id: str,
    weeks: Optional[int] = Query(None, ge=1, le=52, description="Lookback window in weeks"),
    tokens: TokenStore = Depends(get_tokens),
    oauth_flow: Optional[StravaOAuthFlow] = Depends(get_optional_strava_oauth_flow),
    client_factory: StravaClientFactory = Depends(get_strava_client_factory),
):
    """Get the athlete's recent Swim, Ride and Run activities."""
    logger.info(f"[get_activities] Fetching activities for athlete {athlete_id}")

    activities = await load_recent_activities(athlete_id, tokens, oauth_flow, client_factory, weeks)
    return StravaActivitiesResponse(
        athlete_id=athlete_id,
        count=len(activities),
        activities=[a.to_dict() for a in activities],
    )
