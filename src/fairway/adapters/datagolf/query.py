"""Query strings and endpoint paths for the DataGolf feeds."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

type QueryValue = str | int | float | bool

FIELD_UPDATES_PATH = "/field-updates"
RANKINGS_PATH = "/preds/get-dg-rankings"
IN_PLAY_PATH = "/preds/in-play"


def build_query_string(params: Mapping[str, QueryValue | None]) -> str:
    """Encode ``params`` without the ``None`` values, keeping their order.

    >>> build_query_string({"tour": "pga", "event_id": None, "dead_heat": False})
    'tour=pga&dead_heat=false'
    """

    filtered = {name: value for name, value in params.items() if value is not None}
    return str(httpx.QueryParams(filtered))


def _with_query(path: str, params: Mapping[str, QueryValue | None]) -> str:
    query = build_query_string(params)
    return f"{path}?{query}" if query else path


@dataclass(slots=True, frozen=True)
class FieldUpdatesQuery:
    tour: str = "pga"
    file_format: str = "json"


@dataclass(slots=True, frozen=True)
class RankingsQuery:
    file_format: str = "json"


@dataclass(slots=True, frozen=True)
class InPlayQuery:
    tour: str = "pga"
    dead_heat: str = "no"
    odds_format: str = "percent"
    file_format: str = "json"


def field_updates_path(query: FieldUpdatesQuery, *, api_key: str | None = None) -> str:
    return _with_query(
        FIELD_UPDATES_PATH,
        {"tour": query.tour, "file_format": query.file_format, "key": api_key},
    )


def rankings_path(query: RankingsQuery, *, api_key: str | None = None) -> str:
    return _with_query(RANKINGS_PATH, {"file_format": query.file_format, "key": api_key})


def in_play_path(query: InPlayQuery, *, api_key: str | None = None) -> str:
    return _with_query(
        IN_PLAY_PATH,
        {
            "tour": query.tour,
            "dead_heat": query.dead_heat,
            "odds_format": query.odds_format,
            "file_format": query.file_format,
            "key": api_key,
        },
    )
