"""Domain model for tournament live sync."""

from __future__ import annotations

from .enums import RowOutcomeKind, TournamentStatus
from .feeds import FieldEntry, LiveEntry, LiveFeeds, RankingEntry, TeeTimes
from .golf import (
    FINAL_ROUND,
    FINISHED_ROUND,
    Golfer,
    Team,
    Tournament,
    TournamentGolfer,
    new_id,
)

__all__ = [
    "FINAL_ROUND",
    "FINISHED_ROUND",
    "FieldEntry",
    "Golfer",
    "LiveEntry",
    "LiveFeeds",
    "RankingEntry",
    "RowOutcomeKind",
    "Team",
    "TeeTimes",
    "Tournament",
    "TournamentGolfer",
    "TournamentStatus",
    "new_id",
]
