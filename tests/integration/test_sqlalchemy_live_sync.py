from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

import pytest

from fairway.adapters.datagolf import DataGolfLiveFeedFetcher
from fairway.domain.live_sync import run_live_sync
from fairway.domain.model import RowOutcomeKind, TournamentStatus
from fairway.domain.reconciliation import LiveSyncResult
from fairway.domain.reconciliation import engine as engine_module
from tests.helpers.datagolf import (
    datagolf_test_config,
    make_client_factory,
    recorded_payloads,
    routing_handler,
)
from tests.helpers.live_sync import fixed_clock, make_tournament

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from fairway.adapters.sqlalchemy.unit_of_work import SqlAlchemyLiveSyncUnitOfWork
    from fairway.domain.model import TournamentGolfer

type UowFactory = Callable[[], SqlAlchemyLiveSyncUnitOfWork]


def _recorded_fetcher() -> DataGolfLiveFeedFetcher:
    return DataGolfLiveFeedFetcher(
        config=datagolf_test_config(),
        client_factory=make_client_factory(routing_handler(recorded_payloads())),
    )


def _store_tournament(factory: UowFactory) -> UUID:
    tournament = make_tournament()
    with factory() as uow:
        uow.repositories.tournaments.add(tournament)
        uow.commit()
    return tournament.id


def _participation(factory: UowFactory, tournament_id: UUID, api_id: int) -> TournamentGolfer:
    with factory() as uow:
        golfer = uow.repositories.golfers.get_by_api_id(api_id)
        assert golfer is not None
        row = uow.repositories.tournament_golfers.get_for(
            golfer_id=golfer.id, tournament_id=tournament_id
        )
        assert row is not None
        return row


def test_recorded_feeds_build_and_score_the_field(
    sqlite_unit_of_work: UowFactory,
) -> None:
    tournament_id = _store_tournament(sqlite_unit_of_work)

    result = run_live_sync(
        fetcher=_recorded_fetcher(),
        unit_of_work_factory=sqlite_unit_of_work,
        tournament_id=tournament_id,
        clock=fixed_clock(),
    )

    assert isinstance(result, LiveSyncResult)
    assert result.golfers_inserted == 3
    assert result.tournament_golfers_inserted == 3
    assert [outcome.kind for outcome in result.outcomes] == [RowOutcomeKind.PROCESSED] * 2
    assert result.tournament_status is TournamentStatus.ACTIVE

    with sqlite_unit_of_work() as uow:
        tournament = uow.repositories.tournaments.get(tournament_id)
        assert tournament is not None
        assert tournament.start_date == datetime(2025, 4, 10, 8, 3, tzinfo=UTC)
        assert tournament.status is TournamentStatus.ACTIVE
        assert tournament.current_round == 1
        assert tournament.live_play
        assert tournament.leaderboard_updated_at == datetime(2025, 4, 10, 18, 35, 2, tzinfo=UTC)
        amateur = uow.repositories.golfers.get_by_api_id(30001)
        assert amateur is not None
        assert amateur.player_name == "Some Amateur Jr."
        assert amateur.country is None

    scheffler = _participation(sqlite_unit_of_work, tournament_id, 18417)
    assert scheffler.position == "T2"
    assert scheffler.thru == 18
    assert scheffler.round_one == -4
    assert scheffler.world_rank == 1
    assert scheffler.rating == pytest.approx(117.89)
    assert scheffler.round_one_tee_time == "2025-04-10 10:42"

    rory = _participation(sqlite_unit_of_work, tournament_id, 10091)
    assert rory.position == "1"
    assert rory.thru == 12
    assert rory.round_two_tee_time == "2025-04-11 11:15"

    assert _participation(sqlite_unit_of_work, tournament_id, 30001).rating == 3.75


def test_repeated_sync_is_stable(sqlite_unit_of_work: UowFactory) -> None:
    tournament_id = _store_tournament(sqlite_unit_of_work)
    for _ in range(2):
        result = run_live_sync(
            fetcher=_recorded_fetcher(),
            unit_of_work_factory=sqlite_unit_of_work,
            tournament_id=tournament_id,
            clock=fixed_clock(),
        )

    assert isinstance(result, LiveSyncResult)
    assert result.golfers_inserted == 0
    assert result.tournament_golfers_inserted == 0
    assert result.tournament_golfers_deleted == 0
    assert _participation(sqlite_unit_of_work, tournament_id, 18417).pos_change == 0


def test_failed_reconciliation_writes_nothing(
    sqlite_unit_of_work: UowFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    tournament_id = _store_tournament(sqlite_unit_of_work)

    def fail(*args: object, **kwargs: object) -> None:
        raise RuntimeError("tournament update failed")

    monkeypatch.setattr(engine_module, "_advance_tournament", fail)

    with pytest.raises(RuntimeError):
        run_live_sync(
            fetcher=_recorded_fetcher(),
            unit_of_work_factory=sqlite_unit_of_work,
            tournament_id=tournament_id,
            clock=fixed_clock(),
        )

    with sqlite_unit_of_work() as uow:
        assert uow.repositories.golfers.get_by_api_id(18417) is None
        assert uow.repositories.tournament_golfers.list_for_tournament(tournament_id) == []
        tournament = uow.repositories.tournaments.get(tournament_id)
        assert tournament is not None
        assert tournament.start_date == datetime(2025, 4, 10, 12, 0, tzinfo=UTC)
        assert tournament.status is TournamentStatus.UPCOMING
