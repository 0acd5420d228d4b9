"""Tournament lifecycle: start detection, completion and status transitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from fairway.domain.model import FINAL_ROUND, FINISHED_ROUND, TournamentStatus
from fairway.domain.normalizers import are_all_players_finished, is_round_running

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from fairway.domain.model import LiveEntry, Tournament


@dataclass(slots=True, frozen=True, kw_only=True)
class StatusInputs:
    current_status: TournamentStatus
    current_round: int | None
    round_running: bool
    completed: bool


type StatusRule = tuple[Callable[[StatusInputs], bool], TournamentStatus | None]

# Evaluated top to bottom; ``None`` keeps the current status.
STATUS_RULES: Final[tuple[StatusRule, ...]] = (
    (lambda s: s.current_status is TournamentStatus.CANCELLED, TournamentStatus.CANCELLED),
    (lambda s: s.completed, TournamentStatus.COMPLETED),
    (lambda s: s.current_status is TournamentStatus.COMPLETED, TournamentStatus.COMPLETED),
    (lambda s: s.round_running, TournamentStatus.ACTIVE),
    (lambda _s: True, None),
)


def resolve_status(
    current_status: TournamentStatus,
    current_round: int | None,
    *,
    round_running: bool,
    completed: bool,
) -> TournamentStatus:
    """Next tournament status; ``cancelled`` always wins and ``completed`` is final."""

    inputs = StatusInputs(
        current_status=current_status,
        current_round=current_round,
        round_running=round_running,
        completed=completed,
    )
    for matches, target in STATUS_RULES:
        if matches(inputs):
            return current_status if target is None else target
    return current_status


def has_tournament_started(tournament: Tournament, *, now: datetime) -> bool:
    if tournament.status in {TournamentStatus.ACTIVE, TournamentStatus.COMPLETED}:
        return True
    if tournament.live_play:
        return True
    return tournament.status is not TournamentStatus.UPCOMING and tournament.start_date <= now


def is_tournament_completed(live: Sequence[LiveEntry], *, previous_round: int | None) -> bool:
    """Final round done: nobody on the course and everyone finished or out."""

    if previous_round not in {FINAL_ROUND, FINISHED_ROUND}:
        return False
    if not live or is_round_running(live):
        return False
    return are_all_players_finished(live)


def resolve_round(
    previous_round: int | None,
    feed_round: int | None,
    *,
    completed: bool,
) -> int | None:
    if completed or previous_round == FINISHED_ROUND:
        return FINISHED_ROUND
    return feed_round if feed_round is not None else previous_round
