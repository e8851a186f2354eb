"""Services for activity analysis and token storage."""

from .activity_analysis import ActivityAnalysisService, get_activity_analysis_service
from .token_store import InMemoryTokenStore, TokenStore, get_token_store

__all__ = [
    "ActivityAnalysisService",
    "get_activity_analysis_service",
    "InMemoryTokenStore",
    "TokenStore",
    "get_token_store",
]
