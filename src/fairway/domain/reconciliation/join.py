"""Join the field, rankings and live feeds into one record per player."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fairway.domain.normalizers import normalize_country, normalize_player_name
from fairway.domain.reconciliation.contracts import EnrichedPlayer

if TYPE_CHECKING:
    from fairway.domain.model import LiveFeeds


type EnrichedPlayersById = dict[int, EnrichedPlayer]


def join_feeds(feeds: LiveFeeds) -> EnrichedPlayersById:
    """Merge the three feeds by ``api_id``.

    The result contains every player named by the field list or the live feed.
    Rankings only enrich those players; a ranked player absent from both is not
    part of the tournament. Names and countries prefer the field entry, then the
    live entry, then the ranking, and are normalized here once.
    """

    rankings = {entry.api_id: entry for entry in feeds.rankings}
    fields = {entry.api_id: entry for entry in feeds.field}
    lives = {entry.api_id: entry for entry in feeds.live}

    players: EnrichedPlayersById = {}
    for api_id in [*fields, *(api_id for api_id in lives if api_id not in fields)]:
        field_entry = fields.get(api_id)
        ranking = rankings.get(api_id)
        live = lives.get(api_id)

        raw_name = next(
            (
                name
                for name in (
                    field_entry.player_name if field_entry else None,
                    live.player_name if live else None,
                    ranking.player_name if ranking else None,
                )
                if name and name.strip()
            ),
            "",
        )
        country = normalize_country(field_entry.country if field_entry else None)
        if country is None and ranking is not None:
            country = normalize_country(ranking.country)

        players[api_id] = EnrichedPlayer(
            api_id=api_id,
            player_name=normalize_player_name(raw_name),
            country=country,
            field=field_entry,
            ranking=ranking,
            live=live,
        )
    return players


def authoritative_roster(feeds: LiveFeeds) -> frozenset[int]:
    """Field ids, or the live feed's ids when the field list is empty."""

    if feeds.field:
        return frozenset(entry.api_id for entry in feeds.field)
    return frozenset(entry.api_id for entry in feeds.live)
