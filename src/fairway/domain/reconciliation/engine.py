"""Reconcile one tournament's stored rows against a snapshot of the live feeds.

``apply_live_sync`` is the only writer of the live-scoring fields of a
``TournamentGolfer``. It runs inside a caller-owned unit of work and never
commits; the caller commits once after it returns.

Order of work:

1. decide whether the tournament has started
2. before the start, treat the field list as the roster: move the start date to
   the earliest round-one tee time, prune participation rows that left the
   field, upsert golfers and participation rows
3. overwrite live-scoring fields for every live-feed row
4. detect completion, resolve round and status, patch the tournament
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from fairway.domain.errors import (
    DuplicateRowError,
    RosterUnavailableError,
    TournamentNotFoundError,
)
from fairway.domain.model import Golfer, RowOutcomeKind, TournamentGolfer, TournamentStatus
from fairway.domain.normalizers import (
    UNRANKED_SKILL_ESTIMATE,
    compute_position_change,
    earliest_tee_time,
    is_round_running,
    normalize_rating,
    parse_thru,
    usage_for,
    usage_percentages,
)
from fairway.domain.reconciliation.contracts import LiveSyncResult, RowOutcome
from fairway.domain.reconciliation.join import authoritative_roster, join_feeds
from fairway.domain.reconciliation.lifecycle import (
    has_tournament_started,
    is_tournament_completed,
    resolve_round,
    resolve_status,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from uuid import UUID

    from fairway.domain.model import LiveFeeds, TeeTimes, Tournament
    from fairway.domain.ports import LiveSyncRepositories, LiveSyncUnitOfWork
    from fairway.domain.reconciliation.contracts import EnrichedPlayer
    from fairway.domain.reconciliation.join import EnrichedPlayersById

log = getLogger(__name__)

type Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True)
class _SyncContext:
    repositories: LiveSyncRepositories
    tournament: Tournament
    now: datetime
    usage: Mapping[int, float]
    roster_count: int
    result: LiveSyncResult

    def usage_of(self, api_id: int) -> float | None:
        return usage_for(self.usage, api_id, roster_count=self.roster_count)


def apply_live_sync(
    uow: LiveSyncUnitOfWork,
    *,
    tournament_id: UUID,
    feeds: LiveFeeds,
    clock: Clock = utc_now,
) -> LiveSyncResult:
    """Merge ``feeds`` into the stored state of ``tournament_id``.

    Safe to repeat with the same snapshot: a second run changes nothing and
    reports a position change of zero for every player.
    """

    repositories = uow.repositories
    tournament = repositories.tournaments.get(tournament_id)
    if tournament is None:
        raise TournamentNotFoundError(tournament_id)

    now = clock()
    started = has_tournament_started(tournament, now=now)
    players = join_feeds(feeds)
    teams = repositories.teams.list_for_tournament(tournament_id)

    context = _SyncContext(
        repositories=repositories,
        tournament=tournament,
        now=now,
        usage=usage_percentages(team.golfer_api_ids for team in teams),
        roster_count=len(teams),
        result=LiveSyncResult(
            tournament_id=tournament_id,
            tournament_status=tournament.status,
            live_players=len(feeds.live),
            event_name=feeds.event_name,
        ),
    )

    if not started:
        _sync_pre_tournament(context, feeds, players)

    for entry in feeds.live:
        outcome = _sync_live_row(context, players[entry.api_id], started=started)
        context.result.outcomes.append(outcome)

    _advance_tournament(context, feeds)

    result = context.result
    log.info(
        "Live sync for %s: status=%s round=%s golfers +%d/~%d rows +%d/~%d/-%d skipped=%d",
        tournament.name,
        result.tournament_status,
        result.current_round,
        result.golfers_inserted,
        result.golfers_updated,
        result.tournament_golfers_inserted,
        result.tournament_golfers_updated,
        result.tournament_golfers_deleted,
        result.skipped,
    )
    return result


# Pre-tournament -------------------------------------------------------------------


def _sync_pre_tournament(
    context: _SyncContext,
    feeds: LiveFeeds,
    players: EnrichedPlayersById,
) -> None:
    tournament = context.tournament
    roster = authoritative_roster(feeds)
    if not roster:
        raise RosterUnavailableError(tournament.id)

    earliest = earliest_tee_time(entry.tee_times.round_one for entry in feeds.field)
    if earliest is not None and earliest != tournament.start_date:
        log.info(
            "Moving start of %s from %s to %s", tournament.name, tournament.start_date, earliest
        )
        tournament.start_date = earliest
        tournament.updated_at = context.now

    _prune_participation(context, roster)

    for entry in feeds.field:
        player = players[entry.api_id]
        golfer = _upsert_golfer(context, player)
        _upsert_participation(context, golfer, player)


def _prune_participation(context: _SyncContext, roster: frozenset[int]) -> None:
    repositories = context.repositories
    for row in list(repositories.tournament_golfers.list_for_tournament(context.tournament.id)):
        golfer = repositories.golfers.get(row.golfer_id)
        if golfer is not None and golfer.api_id in roster:
            continue
        log.debug("Removing participation %s: golfer left the field", row.id)
        repositories.tournament_golfers.remove(row)
        context.result.tournament_golfers_deleted += 1


def _upsert_golfer(context: _SyncContext, player: EnrichedPlayer) -> Golfer:
    golfers = context.repositories.golfers
    golfer = golfers.get_by_api_id(player.api_id)
    if golfer is None:
        candidate = Golfer(
            api_id=player.api_id,
            player_name=player.player_name,
            country=player.country,
            world_rank=player.world_rank,
            updated_at=context.now,
        )
        try:
            golfers.add(candidate)
        except DuplicateRowError:
            golfer = golfers.get_by_api_id(player.api_id)
            if golfer is None:
                raise
            log.debug("Golfer %s was inserted concurrently, merging", player.api_id)
        else:
            context.result.golfers_inserted += 1
            return candidate

    changes: dict[str, object] = {}
    if player.player_name and player.player_name != golfer.player_name:
        changes["player_name"] = player.player_name
    if player.country is not None:
        changes["country"] = player.country
    if player.world_rank is not None:
        changes["world_rank"] = player.world_rank
    if _apply_changes(golfer, changes, now=context.now):
        context.result.golfers_updated += 1
    return golfer


def _upsert_participation(
    context: _SyncContext,
    golfer: Golfer,
    player: EnrichedPlayer,
) -> None:
    row = context.repositories.tournament_golfers.get_for(
        golfer_id=golfer.id, tournament_id=context.tournament.id
    )
    if row is None:
        row = TournamentGolfer(
            golfer_id=golfer.id,
            tournament_id=context.tournament.id,
            updated_at=context.now,
        )
        _apply_changes(row, _roster_changes(context, player, row), now=context.now)
        existing = _insert_participation(context, row)
        if existing is None:
            return
        row = existing

    if _apply_changes(row, _roster_changes(context, player, row), now=context.now):
        context.result.tournament_golfers_updated += 1


def _roster_changes(
    context: _SyncContext,
    player: EnrichedPlayer,
    row: TournamentGolfer,
) -> dict[str, object]:
    """Tee times, rank, rating and usage; live-scoring fields are left alone."""

    changes = _tee_time_changes(player.tee_times)
    if player.world_rank is not None:
        changes["world_rank"] = player.world_rank
    changes["rating"] = _rating(player, previous=row.rating)
    usage = context.usage_of(player.api_id)
    if usage is not None:
        changes["usage"] = usage
    return changes


# Live rows --------------------------------------------------------------------


def _sync_live_row(
    context: _SyncContext,
    player: EnrichedPlayer,
    *,
    started: bool,
) -> RowOutcome:
    repositories = context.repositories
    golfer = repositories.golfers.get_by_api_id(player.api_id)
    if golfer is None:
        log.debug("Skipping live row %s: unknown golfer", player.api_id)
        return RowOutcome(player.api_id, RowOutcomeKind.SKIPPED_UNKNOWN_GOLFER)

    row = repositories.tournament_golfers.get_for(
        golfer_id=golfer.id, tournament_id=context.tournament.id
    )
    if row is None:
        if not started:
            log.debug("Skipping live row %s: no participation row", player.api_id)
            return RowOutcome(player.api_id, RowOutcomeKind.SKIPPED_MISSING_PARTICIPATION)
        row = TournamentGolfer(
            golfer_id=golfer.id,
            tournament_id=context.tournament.id,
            updated_at=context.now,
        )
        _apply_changes(row, _live_changes(context, player, row), now=context.now)
        existing = _insert_participation(context, row)
        if existing is None:
            return RowOutcome(player.api_id, RowOutcomeKind.INSERTED)
        row = existing

    if _apply_changes(row, _live_changes(context, player, row), now=context.now):
        context.result.tournament_golfers_updated += 1
    return RowOutcome(player.api_id, RowOutcomeKind.PROCESSED)


def _live_changes(
    context: _SyncContext,
    player: EnrichedPlayer,
    row: TournamentGolfer,
) -> dict[str, object]:
    live = player.live
    if live is None:
        return {}

    changes: dict[str, object] = {
        "position": live.position,
        "pos_change": compute_position_change(row.position, live.position),
        "score": live.score,
        "today": live.today,
        "round": live.round,
        "end_hole": live.end_hole,
        "round_one": live.round_one,
        "round_two": live.round_two,
        "round_three": live.round_three,
        "round_four": live.round_four,
        "make_cut": live.make_cut,
        "top_ten": live.top_ten,
        "top_twenty": live.top_twenty,
        "win": live.win,
        "rating": _rating(player, previous=row.rating),
    }
    thru = parse_thru(live.thru)
    if thru is not None:
        changes["thru"] = thru
    if player.world_rank is not None:
        changes["world_rank"] = player.world_rank
    usage = context.usage_of(player.api_id)
    if usage is not None:
        changes["usage"] = usage
    changes.update(_tee_time_changes(player.tee_times))
    return changes


# Tournament -------------------------------------------------------------------


def _advance_tournament(context: _SyncContext, feeds: LiveFeeds) -> None:
    tournament = context.tournament
    round_running = is_round_running(feeds.live)
    # a cancelled tournament never completes
    completed = tournament.status is not TournamentStatus.CANCELLED and is_tournament_completed(
        feeds.live, previous_round=tournament.current_round
    )

    next_round = resolve_round(tournament.current_round, feeds.current_round, completed=completed)
    next_status = resolve_status(
        tournament.status,
        tournament.current_round,
        round_running=round_running,
        completed=completed,
    )

    changes: dict[str, object] = {
        "current_round": next_round,
        "status": next_status,
        "live_play": round_running,
    }
    if feeds.live and feeds.last_update is not None:
        changes["leaderboard_updated_at"] = feeds.last_update
    if _apply_changes(tournament, changes, now=context.now):
        log.info(
            "Tournament %s now %s (round %s, live_play=%s)",
            tournament.name,
            next_status,
            next_round,
            round_running,
        )

    result = context.result
    result.tournament_status = tournament.status
    result.tournament_completed = completed
    result.current_round = tournament.current_round


# Helpers ----------------------------------------------------------------------


def _insert_participation(
    context: _SyncContext,
    row: TournamentGolfer,
) -> TournamentGolfer | None:
    """Add ``row``; return the stored row instead if another writer got there first."""

    repository = context.repositories.tournament_golfers
    try:
        repository.add(row)
    except DuplicateRowError:
        existing = repository.get_for(golfer_id=row.golfer_id, tournament_id=row.tournament_id)
        if existing is None:
            raise
        log.debug("Participation %s was inserted concurrently, patching", row.golfer_id)
        return existing
    context.result.tournament_golfers_inserted += 1
    return None


def _tee_time_changes(tee_times: TeeTimes | None) -> dict[str, object]:
    if tee_times is None:
        return {}
    candidates = {
        "round_one_tee_time": tee_times.round_one,
        "round_two_tee_time": tee_times.round_two,
        "round_three_tee_time": tee_times.round_three,
        "round_four_tee_time": tee_times.round_four,
    }
    return {name: value for name, value in candidates.items() if value is not None}


def _rating(player: EnrichedPlayer, *, previous: float | None) -> float:
    if player.skill_estimate is not None:
        return normalize_rating(player.skill_estimate)
    if previous is not None:
        return previous
    return normalize_rating(UNRANKED_SKILL_ESTIMATE)


def _apply_changes(entity: object, changes: Mapping[str, object], *, now: datetime) -> bool:
    changed = False
    for name, value in changes.items():
        if getattr(entity, name) != value:
            setattr(entity, name, value)
            changed = True
    if changed:
        setattr(entity, "updated_at", now)  # noqa: B010
    return changed
