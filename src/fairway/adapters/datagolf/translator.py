"""Translate DataGolf payloads into provider-independent feed snapshots."""

from __future__ import annotations

from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from fairway.domain.model import FieldEntry, LiveEntry, LiveFeeds, RankingEntry, TeeTimes

if TYPE_CHECKING:
    from .schema import (
        FieldPlayerPayload,
        FieldUpdatesResponse,
        InPlayResponse,
        LivePlayerPayload,
        RankedPlayerPayload,
        RankingsResponse,
    )

log = getLogger(__name__)


def parse_field_entry(payload: FieldPlayerPayload) -> FieldEntry:
    return FieldEntry(
        api_id=payload.dg_id,
        player_name=payload.player_name,
        country=payload.country,
        tee_times=TeeTimes(
            round_one=payload.r1_teetime,
            round_two=payload.r2_teetime,
            round_three=payload.r3_teetime,
            round_four=payload.r4_teetime,
        ),
        start_hole=payload.start_hole,
        dk_salary=payload.dk_salary,
        fd_salary=payload.fd_salary,
        withdrawn=payload.is_withdrawn,
    )


def parse_ranking_entry(payload: RankedPlayerPayload) -> RankingEntry:
    return RankingEntry(
        api_id=payload.dg_id,
        player_name=payload.player_name,
        country=payload.country,
        world_rank=payload.owgr_rank,
        skill_estimate=payload.dg_skill_estimate,
        primary_tour=payload.primary_tour,
    )


def parse_live_entry(payload: LivePlayerPayload) -> LiveEntry:
    return LiveEntry(
        api_id=payload.dg_id,
        player_name=payload.player_name,
        position=payload.current_pos,
        score=payload.current_score,
        today=payload.today,
        thru=payload.thru,
        round=payload.round,
        end_hole=payload.end_hole,
        make_cut=payload.make_cut,
        top_five=payload.top_5,
        top_ten=payload.top_10,
        top_twenty=payload.top_20,
        win=payload.win,
        round_one=payload.r1,
        round_two=payload.r2,
        round_three=payload.r3,
        round_four=payload.r4,
    )


def parse_last_update(value: str | None) -> datetime | None:
    """DataGolf stamps feeds like ``"2025-04-10 18:35:02"`` (UTC) or ISO 8601."""

    if value is None or not value.strip():
        return None
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        log.warning("Ignoring unparseable DataGolf timestamp %r", value)
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def build_live_feeds(
    field_updates: FieldUpdatesResponse,
    rankings: RankingsResponse,
    in_play: InPlayResponse,
) -> LiveFeeds:
    """Combine the three responses; round and event come from the live feed first."""

    info = in_play.info
    current_round = info.current_round
    if current_round is None:
        current_round = field_updates.current_round
    return LiveFeeds(
        field=tuple(parse_field_entry(player) for player in field_updates.field),
        rankings=tuple(parse_ranking_entry(player) for player in rankings.rankings),
        live=tuple(parse_live_entry(player) for player in in_play.data),
        current_round=current_round,
        event_name=info.event_name or field_updates.event_name,
        last_update=parse_last_update(info.last_update),
    )
