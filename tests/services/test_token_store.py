"""Tests for the OAuth token store."""

from tri_pacer.integrations.base import OAuthCredentials
from tri_pacer.services.token_store import InMemoryTokenStore, get_token_store


def make_credentials(token: str = "access_123") -> OAuthCredentials:
    return OAuthCredentials(provider="strava", access_token=token, refresh_token="refresh_456")


class TestInMemoryTokenStore:
    """Tests for the in-memory store."""

    def test_set_and_get(self):
        store = InMemoryTokenStore()
        store.set_token("42", make_credentials())

        assert store.get_token("42").access_token == "access_123"
        assert store.has_token("42") is True
        assert len(store) == 1

    def test_missing_athlete(self):
        store = InMemoryTokenStore()

        assert store.get_token("missing") is None
        assert store.has_token("missing") is False

    def test_set_replaces(self):
        store = InMemoryTokenStore()
        store.set_token("42", make_credentials("old"))
        store.set_token("42", make_credentials("new"))

        assert store.get_token("42").access_token == "new"
        assert len(store) == 1

    def test_delete(self):
        store = InMemoryTokenStore()
        store.set_token("42", make_credentials())

        assert store.delete_token("42") is True
        assert store.has_token("42") is False
        assert store.delete_token("42") is False

    def test_clear(self):
        store = InMemoryTokenStore()
        store.set_token("1", make_credentials())
        store.set_token("2", make_credentials())
        store.clear()

        assert len(store) == 0


def test_token_store_singleton():
    assert get_token_store() is get_token_store()
