"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import Feed, FeedFetchFailure, LiveFeedFetcher, LiveFeedsFetchResult
from .persistence import (
    GolferRepository,
    Repository,
    TeamRepository,
    TournamentGolferRepository,
    TournamentRepository,
)
from .unit_of_work import (
    LiveSyncRepositories,
    LiveSyncUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "Feed",
    "FeedFetchFailure",
    "GolferRepository",
    "LiveFeedFetcher",
    "LiveFeedsFetchResult",
    "LiveSyncRepositories",
    "LiveSyncUnitOfWork",
    "Repository",
    "RepositoryCollection",
    "TeamRepository",
    "TournamentGolferRepository",
    "TournamentRepository",
    "UnitOfWork",
]
