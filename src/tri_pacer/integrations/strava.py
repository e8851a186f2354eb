"""
Strava integration for pulling recent triathlon training.

Implements:
- OAuth 2.0 flow for Strava
- Activity listing
- Recent Swim/Ride/Run activities for pace analysis
"""

import asyncio
import logging
import secrets
import threading
import urllib.parse
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

import httpx

from ..models.training import ActivityRecord
from .base import (
    HTTP_TIMEOUT,
    AuthenticationError,
    IntegrationError,
    OAuthCredentials,
    RateLimitError,
)


logger = logging.getLogger(__name__)


class StravaSport(str, Enum):
    """Strava sport types relevant to triathlon."""
    SWIM = "Swim"
    RIDE = "Ride"
    RUN = "Run"


# Longest wait between rate-limited retries
MAX_RETRY_SLEEP = 60

# Retry-After fallback when Strava omits the header (15 minute window)
DEFAULT_RETRY_AFTER = 900


@dataclass
class StravaActivity:
    """Strava activity data."""
    id: int
    name: str
    sport_type: str
    start_date: datetime
    elapsed_time_sec: int
    moving_time_sec: int
    distance_m: float
    average_speed_mps: Optional[float] = None

    @property
    def sport(self) -> Optional[StravaSport]:
        try:
            return StravaSport(self.sport_type)
        except ValueError:
            return None

    @property
    def is_triathlon_sport(self) -> bool:
        return self.sport is not None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "sport_type": self.sport_type,
            "start_date": self.start_date.isoformat(),
            "elapsed_time_sec": self.elapsed_time_sec,
            "moving_time_sec": self.moving_time_sec,
            "distance_m": self.distance_m,
            "average_speed_mps": self.average_speed_mps,
        }

    def to_record(self) -> ActivityRecord:
        """Convert to the record type used by activity analysis."""
        return ActivityRecord(
            type=self.sport_type,
            distance=self.distance_m,
            moving_time=self.moving_time_sec,
            start_date=self.start_date,
            name=self.name,
        )

    @classmethod
    def from_api_response(cls, data: dict) -> "StravaActivity":
        """Parse from Strava API response. Falls back to the legacy `type` field."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            sport_type=data.get("sport_type") or data.get("type", ""),
            start_date=datetime.fromisoformat(data["start_date"].replace("Z", "+00:00")),
            elapsed_time_sec=data.get("elapsed_time", data["moving_time"]),
            moving_time_sec=data["moving_time"],
            distance_m=data.get("distance", 0),
            average_speed_mps=data.get("average_speed"),
        )


def _parse_expires_at(data: dict) -> Optional[datetime]:
    return datetime.fromtimestamp(data["expires_at"]) if data.get("expires_at") else None


def _error_message(response: httpx.Response, fallback: str) -> str:
    if not response.content:
        return fallback
    try:
        return response.json().get("message", fallback)
    except ValueError:
        return response.text or fallback


class StravaOAuthFlow:
    """
    OAuth 2.0 authorization-code flow for Strava.

    Every authorization URL carries its own single-use state token, so
    several athletes can be mid-login at once.

    Usage:
        oauth = StravaOAuthFlow(
            client_id="your_client_id",
            client_secret="your_client_secret",
            redirect_uri="http://localhost:5173/strava/callback",
        )
        state = oauth.generate_state()
        auth_url = oauth.get_authorization_url(state)
        # After the athlete authorizes, check the state and exchange the code:
        if oauth.validate_state(returned_state):
            credentials = await oauth.exchange_code(code)
    """

    provider = "strava"
    authorize_url = "https://www.strava.com/oauth/authorize"
    token_url = "https://www.strava.com/oauth/token"

    DEFAULT_SCOPE = "read,activity:read_all"

    # How long an issued state stays redeemable
    STATE_TTL = timedelta(minutes=10)

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        scope: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scope = scope or self.DEFAULT_SCOPE
        self.transport = transport
        self._pending_states: Dict[str, datetime] = {}
        self._states_lock = threading.Lock()

    def generate_state(self) -> str:
        """Issue a new CSRF state token."""
        state = secrets.token_urlsafe(32)
        now = datetime.now()
        with self._states_lock:
            self._pending_states = {
                s: issued for s, issued in self._pending_states.items()
                if now - issued < self.STATE_TTL
            }
            self._pending_states[state] = now
        return state

    def validate_state(self, state: str) -> bool:
        """Redeem a state token. Each token validates at most once."""
        with self._states_lock:
            issued = self._pending_states.pop(state, None)
        return issued is not None and datetime.now() - issued < self.STATE_TTL

    def get_authorization_url(self, state: Optional[str] = None) -> str:
        """
        Get the Strava authorization URL.

        Args:
            state: State token from generate_state; a new one is issued if omitted

        Returns:
            Full authorization URL to redirect the athlete to.
        """
        state = state or self.generate_state()

        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
            "approval_prompt": "auto",
        }

        query = urllib.parse.urlencode(params)
        return f"{self.authorize_url}?{query}"

    async def _post_token(self, form: Dict[str, str], failure: str) -> dict:
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self.transport) as client:
            response = await client.post(
                self.token_url,
                data={
                    "client_id": self.client_id,
                    "client_secret": self.client_secret,
                    **form,
                },
            )

        if response.status_code != 200:
            raise AuthenticationError(
                _error_message(response, f"{failure}: {response.status_code}"),
                self.provider,
            )
        return response.json()

    async def exchange_code(self, code: str) -> OAuthCredentials:
        """
        Exchange authorization code for access token.

        Args:
            code: Authorization code from callback

        Returns:
            OAuth credentials with access and refresh tokens

        Raises:
            AuthenticationError: If code exchange fails
        """
        data = await self._post_token(
            {"code": code, "grant_type": "authorization_code"},
            "Token exchange failed",
        )

        athlete = data.get("athlete") or {}
        firstname = athlete.get("firstname", "")
        lastname = athlete.get("lastname", "")
        user_name = f"{firstname} {lastname}".strip() if firstname or lastname else None

        logger.info(f"Exchanged Strava code for athlete {athlete.get('id')}")

        return OAuthCredentials(
            provider=self.provider,
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=_parse_expires_at(data),
            token_type="Bearer",
            scope=self.scope,
            user_id=str(athlete.get("id")) if athlete.get("id") else None,
            user_name=user_name,
        )

    async def refresh_token(self, credentials: OAuthCredentials) -> OAuthCredentials:
        """
        Refresh an expired access token.

        Raises:
            AuthenticationError: If no refresh token or refresh fails
        """
        if not credentials.refresh_token:
            raise AuthenticationError("No refresh token available", self.provider)

        data = await self._post_token(
            {"refresh_token": credentials.refresh_token, "grant_type": "refresh_token"},
            "Token refresh failed",
        )

        return OAuthCredentials(
            provider=self.provider,
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token", credentials.refresh_token),
            expires_at=_parse_expires_at(data),
            token_type="Bearer",
            scope=credentials.scope,
            user_id=credentials.user_id,
            user_name=credentials.user_name,
            updated_at=datetime.now(),
        )


class StravaClient:
    """
    Client for Strava API v3.

    Rate limits (Strava API):
    - 15-minute limit: 200 requests
    - Daily limit: 2,000 requests

    Usage:
        async with StravaClient(credentials) as client:
            activities = await client.get_recent_triathlon_activities(weeks=4)
    """

    provider = "strava"
    base_url = "https://www.strava.com/api/v3"

    def __init__(
        self,
        credentials: OAuthCredentials,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if credentials.provider != "strava":
            raise ValueError("Credentials must be for Strava")
        self.credentials = credentials
        self.transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=self.transport)
        return self._http_client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "StravaClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        max_retries: int = 3,
    ) -> Any:
        """
        Make an API request with rate limit handling.

        Args:
            method: HTTP method
            endpoint: API endpoint (e.g., "/athlete/activities")
            params: Query parameters
            max_retries: Maximum attempts when rate limited

        Returns:
            Response data (dict or list)

        Raises:
            AuthenticationError: If token is expired or invalid
            RateLimitError: If rate limit exceeded after retries
            IntegrationError: For other API errors
        """
        url = f"{self.base_url}{endpoint}"
        headers = self.credentials.authorization_header

        client = await self._get_client()

        for attempt in range(max_retries):
            response = await client.request(method, url, headers=headers, params=params)

            if response.status_code == 200:
                return response.json()

            if response.status_code == 401:
                raise AuthenticationError(
                    "Token expired or invalid. Please re-authenticate.",
                    self.provider,
                )

            if response.status_code == 404:
                raise IntegrationError(f"Resource not found: {endpoint}", self.provider, "not_found")

            if response.status_code == 429:
                retry_after = self._get_retry_after(response)
                if attempt < max_retries - 1:
                    logger.warning(f"Strava rate limited, retrying in {min(retry_after, MAX_RETRY_SLEEP)}s")
                    await asyncio.sleep(min(retry_after, MAX_RETRY_SLEEP))
                    continue
                raise RateLimitError(
                    "Strava rate limit exceeded. Please wait before retrying.",
                    self.provider,
                    retry_after,
                )

            raise IntegrationError(
                f"Strava API error: {_error_message(response, f'HTTP {response.status_code}')}",
                self.provider,
                str(response.status_code),
            )

        raise IntegrationError("Max retries exceeded", self.provider)

    def _get_retry_after(self, response: httpx.Response) -> int:
        """Get retry-after time from rate limit response."""
        retry_after = response.headers.get("Retry-After")
        if retry_after and retry_after.isdigit():
            return int(retry_after)
        return DEFAULT_RETRY_AFTER

    async def get_activities(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: int = 50,
        page: int = 1,
    ) -> List[StravaActivity]:
        """
        Get the athlete's activities.

        Args:
            start_date: Start of date range
            end_date: End of date range
            limit: Activities per page (max 200)
            page: Page number

        Returns:
            List of StravaActivity objects; malformed entries are skipped
        """
        params = {
            "per_page": min(limit, 200),
            "page": page,
        }

        if start_date:
            params["after"] = int(start_date.timestamp())
        if end_date:
            params["before"] = int(end_date.timestamp())

        response = await self._request("GET", "/athlete/activities", params)

        activities = []
        if isinstance(response, list):
            for data in response:
                try:
                    activities.append(StravaActivity.from_api_response(data))
                except (KeyError, ValueError) as e:
                    logger.debug(f"Skipping malformed Strava activity: {e}")
                    continue

        return activities

    async def get_recent_triathlon_activities(
        self,
        weeks: int = 4,
        limit: int = 100,
        now: Optional[datetime] = None,
    ) -> List[StravaActivity]:
        """Swim, Ride and Run activities from the last `weeks` weeks."""
        start_date = (now or datetime.now()) - timedelta(weeks=weeks)
        activities = await self.get_activities(start_date=start_date, limit=limit)
        recent = [a for a in activities if a.is_triathlon_sport]
        logger.info(f"Fetched {len(activities)} Strava activities, {len(recent)} swim/ride/run")
        return recent
