"""External service integrations."""

from .base import (
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)
from .strava import (
    StravaActivity,
    StravaClient,
    StravaOAuthFlow,
    StravaSport,
)

__all__ = [
    "AuthenticationError",
    "IntegrationError",
    "OAuthCredentials",
    "RateLimitError",
    "StravaActivity",
    "StravaClient",
    "StravaOAuthFlow",
    "StravaSport",
]
