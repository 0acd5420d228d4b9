"""Application service running one live sync for one tournament."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING, Literal

from fairway.domain.errors import (
    FeedAuthenticationError,
    FeedFetchError,
    TournamentNotFoundError,
)
from fairway.domain.event_matching import event_name_looks_compatible
from fairway.domain.reconciliation import apply_live_sync, utc_now

if TYPE_CHECKING:
    from collections.abc import Callable
    from uuid import UUID

    from fairway.domain.event_matching import EventNameMatch
    from fairway.domain.model import LiveFeeds, Tournament
    from fairway.domain.ports import (
        LiveFeedFetcher,
        LiveFeedsFetchResult,
        LiveSyncUnitOfWork,
    )
    from fairway.domain.reconciliation import LiveSyncResult
    from fairway.domain.reconciliation.engine import Clock

log = getLogger(__name__)


class SkipReason(StrEnum):
    NO_ACTIVE_TOURNAMENT = "no_active_tournament"
    EVENT_NAME_MISMATCH = "event_name_mismatch"


@dataclass(slots=True, frozen=True, kw_only=True)
class LiveSyncSkipped:
    """Nothing was written; ``reason`` says why."""

    reason: SkipReason
    tournament_id: UUID | None = None
    tournament_name: str | None = None
    event_name: str | None = None
    match: EventNameMatch | None = None
    ok: Literal[True] = True

    @property
    def score(self) -> float | None:
        return self.match.score if self.match is not None else None


def run_live_sync(
    *,
    fetcher: LiveFeedFetcher,
    unit_of_work_factory: Callable[[], LiveSyncUnitOfWork],
    tournament_id: UUID | None = None,
    clock: Clock = utc_now,
    check_event_name: bool = True,
) -> LiveSyncResult | LiveSyncSkipped:
    """Fetch the live feeds and reconcile them into the target tournament.

    The target is ``tournament_id`` when given, otherwise the active tournament.
    It is looked up in a short unit of work that is closed before the feeds are
    fetched. A failed feed raises ``FeedFetchError`` before anything is written.
    Reconciliation runs in a second unit of work, committed once on success.
    """

    with unit_of_work_factory() as uow:
        tournament = _resolve_tournament(uow, tournament_id)
    if tournament is None:
        log.info("No active tournament, skipping live sync")
        return LiveSyncSkipped(reason=SkipReason.NO_ACTIVE_TOURNAMENT)

    # no transaction is held while the feeds are fetched
    feeds = _require_feeds(fetcher())

    if check_event_name and feeds.event_name:
        match = event_name_looks_compatible(tournament.name, feeds.event_name)
        if not match.ok:
            log.warning(
                "DataGolf event %r does not look like %r (score %.2f), skipping live sync",
                feeds.event_name,
                tournament.name,
                match.score,
            )
            return LiveSyncSkipped(
                reason=SkipReason.EVENT_NAME_MISMATCH,
                tournament_id=tournament.id,
                tournament_name=tournament.name,
                event_name=feeds.event_name,
                match=match,
            )

    with unit_of_work_factory() as uow:
        result = apply_live_sync(uow, tournament_id=tournament.id, feeds=feeds, clock=clock)
        uow.commit()
    return result


def _resolve_tournament(uow: LiveSyncUnitOfWork, tournament_id: UUID | None) -> Tournament | None:
    tournaments = uow.repositories.tournaments
    if tournament_id is None:
        return tournaments.find_active()
    tournament = tournaments.get(tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(tournament_id)
    return tournament


def _require_feeds(fetched: LiveFeedsFetchResult) -> LiveFeeds:
    if fetched.ok and fetched.feeds is not None:
        return fetched.feeds
    for failure in fetched.failures:
        log.error("Feed %s", failure.describe())
    if any(failure.is_authentication_error for failure in fetched.failures):
        raise FeedAuthenticationError(fetched.failures)
    raise FeedFetchError(fetched.failures)
