"""In-memory fakes and builders for live sync tests."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from fairway.domain.errors import DuplicateRowError
from fairway.domain.model import (
    FieldEntry,
    Golfer,
    LiveEntry,
    LiveFeeds,
    RankingEntry,
    Team,
    TeeTimes,
    Tournament,
    TournamentGolfer,
    TournamentStatus,
)
from fairway.domain.ports.fetching import LiveFeedsFetchResult
from fairway.domain.ports.unit_of_work import LiveSyncRepositories

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Sequence
    from types import TracebackType
    from uuid import UUID

    from fairway.domain.ports.fetching import FeedFetchFailure

NOW = datetime(2025, 4, 9, 12, 0, tzinfo=UTC)


def fixed_clock(moment: datetime = NOW) -> Callable[[], datetime]:
    def clock() -> datetime:
        return moment

    return clock


# Repositories -----------------------------------------------------------------


class FakeGolferRepository:
    def __init__(self, golfers: Iterable[Golfer] = ()) -> None:
        self.items: dict[UUID, Golfer] = {}
        for golfer in golfers:
            self.items[golfer.id] = golfer
        self.duplicate_on_add: Golfer | None = None

    def add(self, entity: Golfer) -> None:
        if self.duplicate_on_add is not None:
            # simulate a concurrent writer winning the insert race
            winner, self.duplicate_on_add = self.duplicate_on_add, None
            self.items[winner.id] = winner
            raise DuplicateRowError(f"golfer api_id={entity.api_id} already exists")
        if self.get_by_api_id(entity.api_id) is not None:
            raise DuplicateRowError(f"golfer api_id={entity.api_id} already exists")
        self.items[entity.id] = entity

    def get(self, golfer_id: UUID) -> Golfer | None:
        return self.items.get(golfer_id)

    def get_by_api_id(self, api_id: int) -> Golfer | None:
        return next((golfer for golfer in self.items.values() if golfer.api_id == api_id), None)


class FakeTournamentRepository:
    def __init__(self, tournaments: Iterable[Tournament] = ()) -> None:
        self.items: dict[UUID, Tournament] = {t.id: t for t in tournaments}

    def add(self, entity: Tournament) -> None:
        self.items[entity.id] = entity

    def get(self, tournament_id: UUID) -> Tournament | None:
        return self.items.get(tournament_id)

    def find_active(self) -> Tournament | None:
        for tournament in self.items.values():
            if tournament.status is TournamentStatus.ACTIVE:
                return tournament
        return next((t for t in self.items.values() if t.live_play), None)


class FakeTournamentGolferRepository:
    def __init__(self, rows: Iterable[TournamentGolfer] = ()) -> None:
        self.items: dict[UUID, TournamentGolfer] = {row.id: row for row in rows}
        self.removed: list[TournamentGolfer] = []
        self.duplicate_on_add: TournamentGolfer | None = None

    def add(self, entity: TournamentGolfer) -> None:
        if self.duplicate_on_add is not None:
            # the engine looked first, so only a concurrent writer can win here
            winner, self.duplicate_on_add = self.duplicate_on_add, None
            self.items[winner.id] = winner
            raise DuplicateRowError("participation already exists")
        if self.get_for(golfer_id=entity.golfer_id, tournament_id=entity.tournament_id):
            raise DuplicateRowError("participation already exists")
        self.items[entity.id] = entity

    def get_for(self, *, golfer_id: UUID, tournament_id: UUID) -> TournamentGolfer | None:
        return next(
            (
                row
                for row in self.items.values()
                if row.golfer_id == golfer_id and row.tournament_id == tournament_id
            ),
            None,
        )

    def list_for_tournament(self, tournament_id: UUID) -> Sequence[TournamentGolfer]:
        return [row for row in self.items.values() if row.tournament_id == tournament_id]

    def remove(self, entity: TournamentGolfer) -> None:
        self.removed.append(self.items.pop(entity.id))


class FakeTeamRepository:
    def __init__(self, teams: Iterable[Team] = ()) -> None:
        self.items: list[Team] = list(teams)

    def add(self, entity: Team) -> None:
        self.items.append(entity)

    def list_for_tournament(self, tournament_id: UUID) -> Sequence[Team]:
        return [team for team in self.items if team.tournament_id == tournament_id]


class FakeLiveSyncUnitOfWork:
    """In-memory unit of work; records commits and rollbacks instead of persisting."""

    def __init__(
        self,
        *,
        tournaments: Iterable[Tournament] = (),
        golfers: Iterable[Golfer] = (),
        tournament_golfers: Iterable[TournamentGolfer] = (),
        teams: Iterable[Team] = (),
    ) -> None:
        self.golfers = FakeGolferRepository(golfers)
        self.tournaments = FakeTournamentRepository(tournaments)
        self.tournament_golfers = FakeTournamentGolferRepository(tournament_golfers)
        self.teams = FakeTeamRepository(teams)
        self._repositories = LiveSyncRepositories(
            golfers=self.golfers,
            tournaments=self.tournaments,
            tournament_golfers=self.tournament_golfers,
            teams=self.teams,
        )
        self.commits = 0
        self.rollbacks = 0
        self.entries = 0
        self.is_open = False

    @property
    def repositories(self) -> LiveSyncRepositories:
        return self._repositories

    def __enter__(self) -> FakeLiveSyncUnitOfWork:
        self.entries += 1
        self.is_open = True
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> Literal[False]:
        self.is_open = False
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1

    def participation_for(self, api_id: int, tournament_id: UUID) -> TournamentGolfer | None:
        golfer = self.golfers.get_by_api_id(api_id)
        if golfer is None:
            return None
        return self.tournament_golfers.get_for(golfer_id=golfer.id, tournament_id=tournament_id)


class FakeLiveFeedFetcher:
    def __init__(
        self,
        feeds: LiveFeeds | None = None,
        *,
        failures: Sequence[FeedFetchFailure] = (),
    ) -> None:
        self.result = LiveFeedsFetchResult(feeds=feeds, failures=tuple(failures))
        self.calls = 0

    def __call__(self) -> LiveFeedsFetchResult:
        self.calls += 1
        return self.result


# Builders ---------------------------------------------------------------------


def make_tournament(
    *,
    name: str = "Masters Tournament",
    status: TournamentStatus = TournamentStatus.UPCOMING,
    start_date: datetime = datetime(2025, 4, 10, 12, 0, tzinfo=UTC),
    current_round: int | None = None,
    live_play: bool = False,
) -> Tournament:
    return Tournament(
        name=name,
        status=status,
        start_date=start_date,
        current_round=current_round,
        live_play=live_play,
    )


def field_entry(
    api_id: int,
    name: str = "",
    *,
    country: str | None = "USA",
    round_one: str | None = None,
    withdrawn: bool = False,
) -> FieldEntry:
    return FieldEntry(
        api_id=api_id,
        player_name=name or f"Player, Number {api_id}",
        country=country,
        tee_times=TeeTimes(round_one=round_one),
        withdrawn=withdrawn,
    )


def ranking_entry(
    api_id: int,
    *,
    skill_estimate: float | None = 1.0,
    world_rank: int | None = None,
    country: str | None = None,
) -> RankingEntry:
    return RankingEntry(
        api_id=api_id,
        player_name=f"Player, Number {api_id}",
        country=country,
        world_rank=world_rank,
        skill_estimate=skill_estimate,
    )


def live_entry(
    api_id: int,
    *,
    position: str | None = "T5",
    thru: str | None = "9",
    score: float | None = -3,
    today: float | None = -1,
    round_number: int | None = 1,
) -> LiveEntry:
    return LiveEntry(
        api_id=api_id,
        player_name=f"Player, Number {api_id}",
        position=position,
        score=score,
        today=today,
        thru=thru,
        round=round_number,
        make_cut=0.75,
        top_ten=0.2,
        top_twenty=0.35,
        win=0.02,
    )


def make_feeds(
    *,
    field: Iterable[FieldEntry] = (),
    rankings: Iterable[RankingEntry] = (),
    live: Iterable[LiveEntry] = (),
    current_round: int | None = None,
    event_name: str | None = "Masters Tournament",
    last_update: datetime | None = None,
) -> LiveFeeds:
    return LiveFeeds(
        field=tuple(field),
        rankings=tuple(rankings),
        live=tuple(live),
        current_round=current_round,
        event_name=event_name,
        last_update=last_update,
    )


def seed_participant(
    uow: FakeLiveSyncUnitOfWork,
    tournament: Tournament,
    api_id: int,
    **fields: object,
) -> TournamentGolfer:
    """Store a golfer and its participation row for ``tournament``."""

    golfer = Golfer(api_id=api_id, player_name=f"Number {api_id} Player")
    uow.golfers.add(golfer)
    row = TournamentGolfer(golfer_id=golfer.id, tournament_id=tournament.id)
    for name, value in fields.items():
        setattr(row, name, value)
    uow.tournament_golfers.add(row)
    return row
