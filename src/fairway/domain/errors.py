"""Failures raised by the live sync workflow."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from fairway.domain.ports.fetching import FeedFetchFailure


class LiveSyncError(RuntimeError):
    """Base class for errors that abort a live sync invocation."""


class FeedFetchError(LiveSyncError):
    """One or more provider feeds could not be fetched; nothing was written."""

    def __init__(self, failures: Sequence[FeedFetchFailure]) -> None:
        self.failures = tuple(failures)
        details = "; ".join(failure.describe() for failure in self.failures)
        super().__init__(f"Live feed fetch failed: {details}")


class FeedAuthenticationError(FeedFetchError):
    """The provider rejected the API key (HTTP 401/403)."""

    def __init__(self, failures: Sequence[FeedFetchFailure]) -> None:
        super().__init__(failures)
        self.args = (
            "DataGolf API authentication failed. Verify DATAGOLF_API_KEY is correct "
            f"and active. ({'; '.join(failure.describe() for failure in self.failures)})",
        )


class DomainInvariantError(LiveSyncError):
    """Stored state or feed content makes reconciliation impossible."""


class TournamentNotFoundError(DomainInvariantError):
    def __init__(self, tournament_id: UUID) -> None:
        super().__init__(f"Tournament not found for live sync: {tournament_id}")
        self.tournament_id = tournament_id


class RosterUnavailableError(DomainInvariantError):
    """Neither the field list nor the live feed names any player before tee-off."""

    def __init__(self, tournament_id: UUID) -> None:
        super().__init__(
            f"Cannot determine the field for tournament {tournament_id}: "
            "field list and live feed are both empty"
        )
        self.tournament_id = tournament_id


class DuplicateRowError(RuntimeError):
    """Raised by repositories when a unique key already exists in storage."""
