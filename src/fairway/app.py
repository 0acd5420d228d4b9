"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from fairway.adapters.datagolf import DataGolfLiveFeedFetcher
from fairway.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyLiveSyncUnitOfWork,
    is_started,
    startup,
)
from fairway.config import get_datagolf_config, get_sync_config
from fairway.domain.live_sync import LiveSyncSkipped, run_live_sync
from fairway.domain.model import Tournament, TournamentStatus
from fairway.domain.ports.unit_of_work import LiveSyncUnitOfWork
from fairway.domain.reconciliation import utc_now

if TYPE_CHECKING:
    from datetime import datetime
    from uuid import UUID

    from fairway.domain.ports.fetching import LiveFeedFetcher
    from fairway.domain.reconciliation import LiveSyncResult
    from fairway.domain.reconciliation.engine import Clock

UnitOfWorkFactory = Callable[[], LiveSyncUnitOfWork]


log = getLogger(__name__)


def _ensure_started() -> None:
    if not is_started():
        startup()


def sync_datagolf_live(
    *,
    fetcher: LiveFeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    tournament_id: UUID | None = None,
    tour: str | None = None,
    check_event_name: bool | None = None,
    clock: Clock = utc_now,
) -> LiveSyncResult | LiveSyncSkipped:
    """Run one DataGolf live sync using the configured adapters."""

    sync_config = get_sync_config()
    effective_tour = tour or sync_config.tour
    effective_check = sync_config.check_event_name if check_event_name is None else check_event_name

    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyLiveSyncUnitOfWork
    effective_fetcher = fetcher or DataGolfLiveFeedFetcher(
        config=get_datagolf_config(), tour=effective_tour
    )

    log.info(
        "Starting DataGolf live sync: tournament=%s, tour=%s, check_event_name=%s",
        tournament_id or "active",
        effective_tour,
        effective_check,
    )
    result = run_live_sync(
        fetcher=effective_fetcher,
        unit_of_work_factory=unit_of_work_factory,
        tournament_id=tournament_id,
        clock=clock,
        check_event_name=effective_check,
    )

    if isinstance(result, LiveSyncSkipped):
        log.info("Skipped DataGolf live sync: %s", result.reason)
    else:
        log.info(
            "Finished DataGolf live sync: status=%s, round=%s, completed=%s, live_players=%d",
            result.tournament_status,
            result.current_round,
            result.tournament_completed,
            result.live_players,
        )
    return result


def create_tournament(
    *,
    name: str,
    start_date: datetime,
    end_date: datetime | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Tournament:
    """Persist a new upcoming tournament."""

    if not name.strip():
        raise ValueError("Tournament name must not be blank")
    if end_date is not None and end_date < start_date:
        raise ValueError("Tournament end must not be before its start")

    if unit_of_work_factory is None:
        _ensure_started()
        unit_of_work_factory = SqlAlchemyLiveSyncUnitOfWork

    tournament = Tournament(
        name=name.strip(),
        start_date=start_date,
        end_date=end_date,
        status=TournamentStatus.UPCOMING,
    )
    with unit_of_work_factory() as uow:
        uow.repositories.tournaments.add(tournament)
        uow.commit()
    return tournament
