"""
Shared pieces of the Strava integration.

The credential record kept in the token store and the error types that
routes translate into API errors.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Optional


# Seconds before an outbound call gives up
HTTP_TIMEOUT = 30.0

# Tokens are treated as expired this long before their real expiry
EXPIRY_BUFFER = timedelta(minutes=5)


class IntegrationError(Exception):
    """A provider call failed."""

    def __init__(self, message: str, provider: str = "", code: Optional[str] = None):
        self.provider = provider
        self.code = code
        super().__init__(message)


class RateLimitError(IntegrationError):
    """The provider asked us to back off."""

    def __init__(self, message: str, provider: str, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        super().__init__(message, provider, "rate_limit")


class AuthenticationError(IntegrationError):
    """Code exchange, refresh or token use was rejected."""


@dataclass
class OAuthCredentials:
    """Tokens for one athlete, as returned by the provider's token endpoint."""
    provider: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at: Optional[datetime] = None
    token_type: str = "Bearer"
    scope: Optional[str] = None

    # Athlete as identified by the provider
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    updated_at: datetime = field(default_factory=datetime.now)

    @property
    def is_expired(self) -> bool:
        """Expired, or within EXPIRY_BUFFER of expiring. No expiry means never."""
        if self.expires_at is None:
            return False
        return datetime.now() >= self.expires_at - EXPIRY_BUFFER

    @property
    def needs_refresh(self) -> bool:
        return self.is_expired and self.refresh_token is not None

    @property
    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"{self.token_type} {self.access_token}"}
