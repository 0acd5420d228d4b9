from __future__ import annotations

from uuid import uuid4

import pytest

from fairway.domain.errors import (
    FeedAuthenticationError,
    FeedFetchError,
    TournamentNotFoundError,
)
from fairway.domain.live_sync import LiveSyncSkipped, SkipReason, run_live_sync
from fairway.domain.model import TournamentStatus
from fairway.domain.ports import Feed, FeedFetchFailure, LiveFeedsFetchResult
from fairway.domain.reconciliation import LiveSyncResult
from tests.helpers.live_sync import (
    FakeLiveFeedFetcher,
    FakeLiveSyncUnitOfWork,
    field_entry,
    fixed_clock,
    live_entry,
    make_feeds,
    make_tournament,
    seed_participant,
)


def test_run_live_sync_commits_once_after_reconciling() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE, current_round=1)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    row = seed_participant(uow, tournament, 1)
    fetcher = FakeLiveFeedFetcher(make_feeds(live=[live_entry(1)], current_round=1))

    result = run_live_sync(fetcher=fetcher, unit_of_work_factory=lambda: uow, clock=fixed_clock())

    assert isinstance(result, LiveSyncResult)
    assert result.tournament_id == tournament.id
    assert result.event_name == "Masters Tournament"
    assert row.position == "T5"
    assert uow.commits == 1
    assert uow.rollbacks == 0
    assert fetcher.calls == 1


def test_run_live_sync_targets_explicit_tournament() -> None:
    active = make_tournament(status=TournamentStatus.ACTIVE, name="RBC Heritage")
    upcoming = make_tournament()
    uow = FakeLiveSyncUnitOfWork(tournaments=[active, upcoming])
    fetcher = FakeLiveFeedFetcher(make_feeds(field=[field_entry(1)]))

    result = run_live_sync(
        fetcher=fetcher,
        unit_of_work_factory=lambda: uow,
        tournament_id=upcoming.id,
        clock=fixed_clock(),
    )

    assert isinstance(result, LiveSyncResult)
    assert result.tournament_id == upcoming.id
    assert uow.participation_for(1, upcoming.id) is not None


def test_run_live_sync_skips_without_active_tournament() -> None:
    uow = FakeLiveSyncUnitOfWork(tournaments=[make_tournament()])
    fetcher = FakeLiveFeedFetcher(make_feeds())

    result = run_live_sync(fetcher=fetcher, unit_of_work_factory=lambda: uow)

    assert isinstance(result, LiveSyncSkipped)
    assert result.reason is SkipReason.NO_ACTIVE_TOURNAMENT
    assert fetcher.calls == 0
    assert uow.commits == 0


def test_run_live_sync_rejects_unknown_tournament() -> None:
    uow = FakeLiveSyncUnitOfWork()

    with pytest.raises(TournamentNotFoundError):
        run_live_sync(
            fetcher=FakeLiveFeedFetcher(make_feeds()),
            unit_of_work_factory=lambda: uow,
            tournament_id=uuid4(),
        )

    assert uow.rollbacks == 1


def test_run_live_sync_skips_when_event_name_differs() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    fetcher = FakeLiveFeedFetcher(make_feeds(live=[live_entry(1)], event_name="RBC Heritage"))

    result = run_live_sync(fetcher=fetcher, unit_of_work_factory=lambda: uow)

    assert isinstance(result, LiveSyncSkipped)
    assert result.reason is SkipReason.EVENT_NAME_MISMATCH
    assert result.tournament_id == tournament.id
    assert result.event_name == "RBC Heritage"
    assert result.score == 0.0
    assert uow.commits == 0


def test_run_live_sync_event_check_can_be_disabled() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE, current_round=1)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    seed_participant(uow, tournament, 1)
    fetcher = FakeLiveFeedFetcher(
        make_feeds(live=[live_entry(1)], current_round=1, event_name="RBC Heritage")
    )

    result = run_live_sync(
        fetcher=fetcher,
        unit_of_work_factory=lambda: uow,
        check_event_name=False,
        clock=fixed_clock(),
    )

    assert isinstance(result, LiveSyncResult)
    assert uow.commits == 1


def test_run_live_sync_raises_when_a_feed_fails() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    failure = FeedFetchFailure(
        feed=Feed.LIVE, error="Server error (503)", attempts=4, status_code=503
    )

    with pytest.raises(FeedFetchError) as exc:
        run_live_sync(
            fetcher=FakeLiveFeedFetcher(failures=[failure]),
            unit_of_work_factory=lambda: uow,
        )

    assert not isinstance(exc.value, FeedAuthenticationError)
    assert exc.value.failures == (failure,)
    assert "in-play (HTTP 503, 4 attempts)" in str(exc.value)
    assert uow.commits == 0
    assert uow.entries == 1


def test_run_live_sync_reports_rejected_api_key() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    failures = [
        FeedFetchFailure(feed=Feed.FIELD, error="HTTP error (401)", attempts=1, status_code=401),
        FeedFetchFailure(feed=Feed.RANKINGS, error="Request timeout", attempts=4),
    ]

    with pytest.raises(FeedAuthenticationError) as exc:
        run_live_sync(
            fetcher=FakeLiveFeedFetcher(failures=failures),
            unit_of_work_factory=lambda: uow,
        )

    assert "DATAGOLF_API_KEY" in str(exc.value)
    assert uow.commits == 0


def test_run_live_sync_fetches_with_no_unit_of_work_open() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE, current_round=1)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    seed_participant(uow, tournament, 1)
    feeds = FakeLiveFeedFetcher(make_feeds(live=[live_entry(1)], current_round=1))
    open_during_fetch: list[bool] = []

    def fetcher() -> LiveFeedsFetchResult:
        open_during_fetch.append(uow.is_open)
        return feeds()

    result = run_live_sync(fetcher=fetcher, unit_of_work_factory=lambda: uow, clock=fixed_clock())

    assert isinstance(result, LiveSyncResult)
    assert open_during_fetch == [False]
    assert uow.entries == 2
    assert uow.commits == 1


def test_run_live_sync_rereads_tournament_after_fetching() -> None:
    tournament = make_tournament(status=TournamentStatus.ACTIVE, current_round=1)
    uow = FakeLiveSyncUnitOfWork(tournaments=[tournament])
    feeds = FakeLiveFeedFetcher(make_feeds(live=[live_entry(1)], current_round=1))

    def fetcher() -> LiveFeedsFetchResult:
        # deleted by another writer while the feeds were in flight
        del uow.tournaments.items[tournament.id]
        return feeds()

    with pytest.raises(TournamentNotFoundError):
        run_live_sync(fetcher=fetcher, unit_of_work_factory=lambda: uow, clock=fixed_clock())

    assert uow.commits == 0
    assert uow.rollbacks == 1
