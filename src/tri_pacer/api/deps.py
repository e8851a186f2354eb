"""Dependency injection for API routes."""

from functools import lru_cache
from typing import Callable, Optional

from ..config import get_settings
from ..exceptions import StravaNotConfiguredError
from ..integrations.base import OAuthCredentials
from ..integrations.strava import StravaClient, StravaOAuthFlow
from ..services.activity_analysis import ActivityAnalysisService, get_activity_analysis_service
from ..services.token_store import TokenStore, get_token_store


StravaClientFactory = Callable[[OAuthCredentials], StravaClient]


@lru_cache
def get_strava_oauth_flow() -> StravaOAuthFlow:
    """Get the Strava OAuth flow, configured from settings."""
    settings = get_settings()
    if not settings.strava_configured:
        raise StravaNotConfiguredError()
    return StravaOAuthFlow(
        client_id=settings.strava_client_id,
        client_secret=settings.strava_client_secret,
        redirect_uri=settings.strava_redirect_uri,
        scope=settings.strava_scope,
    )


def get_optional_strava_oauth_flow() -> Optional[StravaOAuthFlow]:
    """Get the Strava OAuth flow, or None when Strava is not configured."""
    if not get_settings().strava_configured:
        return None
    return get_strava_oauth_flow()


def get_strava_client_factory() -> StravaClientFactory:
    """Get a factory that builds a Strava client for stored credentials."""
    return StravaClient


def get_tokens() -> TokenStore:
    """Get the token store instance."""
    return get_token_store()


def get_analysis_service() -> ActivityAnalysisService:
    """Get the activity analysis service instance."""
    return get_activity_analysis_service()
