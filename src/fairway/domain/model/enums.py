"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class TournamentStatus(StrEnum):
    UPCOMING = "upcoming"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RowOutcomeKind(StrEnum):
    """What happened to one live-feed row during reconciliation."""

    PROCESSED = "processed"
    INSERTED = "inserted"
    SKIPPED_UNKNOWN_GOLFER = "skipped-unknown-golfer"
    SKIPPED_MISSING_PARTICIPATION = "skipped-missing-participation"
