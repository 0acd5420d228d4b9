"""Public interface for the DataGolf adapter."""

from __future__ import annotations

from .client import DataGolfClient, DataGolfLiveFeedFetcher
from .query import build_query_string, field_updates_path, in_play_path, rankings_path
from .schema import FieldUpdatesResponse, InPlayResponse, RankingsResponse
from .translator import build_live_feeds

__all__ = [
    "DataGolfClient",
    "DataGolfLiveFeedFetcher",
    "FieldUpdatesResponse",
    "InPlayResponse",
    "RankingsResponse",
    "build_live_feeds",
    "build_query_string",
    "field_updates_path",
    "in_play_path",
    "rankings_path",
]
