"""API route modules."""

from . import export, pacing, strava, training

__all__ = ["export", "pacing", "strava", "training"]
