"""Persisted golf entities.

These are plain dataclasses; the SQLAlchemy adapter maps them imperatively so the
domain never imports the ORM.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from fairway.domain.model.enums import TournamentStatus

if TYPE_CHECKING:
    from datetime import datetime

FINAL_ROUND = 4
FINISHED_ROUND = 5


def new_id() -> UUID:
    return uuid4()


@dataclass(eq=False, kw_only=True)
class Golfer:
    """Player profile keyed by the provider's stable ``api_id``."""

    id: UUID = field(default_factory=new_id)
    api_id: int
    player_name: str
    country: str | None = None
    world_rank: int | None = None
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Tournament:
    id: UUID = field(default_factory=new_id)
    name: str
    start_date: datetime
    end_date: datetime | None = None
    status: TournamentStatus = TournamentStatus.UPCOMING
    current_round: int | None = None
    live_play: bool = False
    leaderboard_updated_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class TournamentGolfer:
    """Participation of one golfer in one tournament."""

    id: UUID = field(default_factory=new_id)
    golfer_id: UUID
    tournament_id: UUID

    position: str | None = None
    pos_change: int | None = None
    score: float | None = None
    today: float | None = None
    thru: int | None = None
    round: int | None = None
    end_hole: int | None = None

    round_one: float | None = None
    round_two: float | None = None
    round_three: float | None = None
    round_four: float | None = None
    round_one_tee_time: str | None = None
    round_two_tee_time: str | None = None
    round_three_tee_time: str | None = None
    round_four_tee_time: str | None = None

    make_cut: float | None = None
    top_ten: float | None = None
    top_twenty: float | None = None
    win: float | None = None

    world_rank: int | None = None
    rating: float | None = None
    usage: float | None = None
    updated_at: datetime | None = None


@dataclass(eq=False, kw_only=True)
class Team:
    """One entrant's roster for a tournament, by golfer ``api_id``."""

    id: UUID = field(default_factory=new_id)
    tournament_id: UUID
    owner: str | None = None
    golfer_api_ids: list[int] = field(default_factory=list[int])
