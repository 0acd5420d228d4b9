"""Reconciliation of DataGolf feed snapshots into stored tournament state.

Flow:
1) join the three feeds into one ``EnrichedPlayer`` per ``api_id``
2) sync the roster while the tournament has not started
3) overwrite live-scoring fields row by row, recording a ``RowOutcome`` each
4) resolve round, status and live play through the lifecycle table
"""

from __future__ import annotations

from .contracts import EnrichedPlayer, LiveSyncResult, RowOutcome
from .engine import apply_live_sync, utc_now
from .join import authoritative_roster, join_feeds
from .lifecycle import (
    STATUS_RULES,
    has_tournament_started,
    is_tournament_completed,
    resolve_round,
    resolve_status,
)

__all__ = [
    "STATUS_RULES",
    "EnrichedPlayer",
    "LiveSyncResult",
    "RowOutcome",
    "apply_live_sync",
    "authoritative_roster",
    "has_tournament_started",
    "is_tournament_completed",
    "join_feeds",
    "resolve_round",
    "resolve_status",
    "utc_now",
]
