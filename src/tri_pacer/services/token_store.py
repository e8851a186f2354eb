"""Storage for athletes' OAuth credentials.

The pace calculator never touches this store; only the Strava routes do.
The in-memory implementation keeps tokens for the lifetime of the process.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..integrations.base import OAuthCredentials


logger = logging.getLogger(__name__)


class TokenStore(ABC):
    """Credentials keyed by athlete id."""

    @abstractmethod
    def get_token(self, athlete_id: str) -> Optional[OAuthCredentials]:
        """Get stored credentials, or None."""

    @abstractmethod
    def set_token(self, athlete_id: str, credentials: OAuthCredentials) -> None:
        """Store or replace credentials."""

    @abstractmethod
    def delete_token(self, athlete_id: str) -> bool:
        """Delete credentials. Returns True if something was removed."""

    def has_token(self, athlete_id: str) -> bool:
        return self.get_token(athlete_id) is not None


class InMemoryTokenStore(TokenStore):
    """Thread-safe dict-backed token store."""

    def __init__(self):
        self._tokens: Dict[str, OAuthCredentials] = {}
        self._lock = threading.Lock()

    def get_token(self, athlete_id: str) -> Optional[OAuthCredentials]:
        with self._lock:
            return self._tokens.get(athlete_id)

    def set_token(self, athlete_id: str, credentials: OAuthCredentials) -> None:
        with self._lock:
            self._tokens[athlete_id] = credentials
        logger.info(f"Stored {credentials.provider} token for athlete {athlete_id}")

    def delete_token(self, athlete_id: str) -> bool:
        with self._lock:
            removed = self._tokens.pop(athlete_id, None) is not None
        if removed:
            logger.info(f"Deleted token for athlete {athlete_id}")
        return removed

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)


# Singleton instance for dependency injection
_token_store: Optional[TokenStore] = None
_token_store_lock = threading.Lock()


def get_token_store() -> TokenStore:
    """Get or create the singleton token store."""
    global _token_store
    with _token_store_lock:
        if _token_store is None:
            _token_store = InMemoryTokenStore()
        return _token_store
