"""Synchronization defaults for the live sync job."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_TOUR = "pga"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    tour: str = DEFAULT_TOUR
    check_event_name: bool = True


def get_sync_config() -> SyncConfig:
    tour = os.getenv("DATAGOLF_TOUR", "").strip() or DEFAULT_TOUR
    check = os.getenv("FAIRWAY_CHECK_EVENT_NAME", "1").strip().lower() not in {"0", "false", "no"}
    return SyncConfig(tour=tour, check_event_name=check)
