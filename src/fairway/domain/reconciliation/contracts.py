"""Shapes passed between the join, lifecycle and engine stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fairway.domain.model import RowOutcomeKind

if TYPE_CHECKING:
    from uuid import UUID

    from fairway.domain.model import (
        FieldEntry,
        LiveEntry,
        RankingEntry,
        TeeTimes,
        TournamentStatus,
    )


@dataclass(slots=True, frozen=True, kw_only=True)
class EnrichedPlayer:
    """All three feeds' view of one player, keyed by ``api_id``."""

    api_id: int
    player_name: str
    country: str | None
    field: FieldEntry | None = None
    ranking: RankingEntry | None = None
    live: LiveEntry | None = None

    @property
    def in_field(self) -> bool:
        return self.field is not None

    @property
    def world_rank(self) -> int | None:
        return self.ranking.world_rank if self.ranking is not None else None

    @property
    def skill_estimate(self) -> float | None:
        return self.ranking.skill_estimate if self.ranking is not None else None

    @property
    def tee_times(self) -> TeeTimes | None:
        return self.field.tee_times if self.field is not None else None


@dataclass(slots=True, frozen=True)
class RowOutcome:
    api_id: int
    kind: RowOutcomeKind

    @property
    def skipped(self) -> bool:
        return self.kind in {
            RowOutcomeKind.SKIPPED_UNKNOWN_GOLFER,
            RowOutcomeKind.SKIPPED_MISSING_PARTICIPATION,
        }


@dataclass(slots=True, kw_only=True)
class LiveSyncResult:
    """Summary of one reconciliation pass over a tournament."""

    tournament_id: UUID
    tournament_status: TournamentStatus
    tournament_completed: bool = False
    golfers_inserted: int = 0
    golfers_updated: int = 0
    tournament_golfers_inserted: int = 0
    tournament_golfers_updated: int = 0
    tournament_golfers_deleted: int = 0
    live_players: int = 0
    current_round: int | None = None
    event_name: str | None = None
    outcomes: list[RowOutcome] = field(default_factory=list[RowOutcome])
    ok: bool = True

    def outcomes_of(self, kind: RowOutcomeKind) -> list[RowOutcome]:
        return [outcome for outcome in self.outcomes if outcome.kind == kind]

    @property
    def skipped(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.skipped)
