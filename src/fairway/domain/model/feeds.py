"""Provider-independent snapshots of the three DataGolf feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


@dataclass(slots=True, frozen=True, kw_only=True)
class TeeTimes:
    round_one: str | None = None
    round_two: str | None = None
    round_three: str | None = None
    round_four: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class FieldEntry:
    api_id: int
    player_name: str
    country: str | None = None
    tee_times: TeeTimes = field(default_factory=TeeTimes)
    start_hole: int | None = None
    dk_salary: float | None = None
    fd_salary: float | None = None
    withdrawn: bool = False


@dataclass(slots=True, frozen=True, kw_only=True)
class RankingEntry:
    api_id: int
    player_name: str
    country: str | None = None
    world_rank: int | None = None
    skill_estimate: float | None = None
    primary_tour: str | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class LiveEntry:
    api_id: int
    player_name: str
    position: str | None = None
    score: float | None = None
    today: float | None = None
    thru: str | None = None
    round: int | None = None
    end_hole: int | None = None
    make_cut: float | None = None
    top_five: float | None = None
    top_ten: float | None = None
    top_twenty: float | None = None
    win: float | None = None
    round_one: float | None = None
    round_two: float | None = None
    round_three: float | None = None
    round_four: float | None = None


@dataclass(slots=True, frozen=True, kw_only=True)
class LiveFeeds:
    """Everything one sync needs from the provider, fetched in one go."""

    field: tuple[FieldEntry, ...] = ()
    rankings: tuple[RankingEntry, ...] = ()
    live: tuple[LiveEntry, ...] = ()
    current_round: int | None = None
    event_name: str | None = None
    last_update: datetime | None = None
