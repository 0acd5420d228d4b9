"""Ports for persisting tournament data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from fairway.domain.model import Golfer, Team, Tournament, TournamentGolfer

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class GolferRepository(Repository[Golfer], Protocol):
    """Golfer profiles; ``add`` raises ``DuplicateRowError`` for a known ``api_id``."""

    def get(self, golfer_id: UUID) -> Golfer | None: ...

    def get_by_api_id(self, api_id: int) -> Golfer | None: ...


@runtime_checkable
class TournamentRepository(Repository[Tournament], Protocol):
    def get(self, tournament_id: UUID) -> Tournament | None: ...

    def find_active(self) -> Tournament | None: ...


@runtime_checkable
class TournamentGolferRepository(Repository[TournamentGolfer], Protocol):
    """Participation rows; ``add`` raises ``DuplicateRowError`` for a known pair."""

    def get_for(self, *, golfer_id: UUID, tournament_id: UUID) -> TournamentGolfer | None: ...

    def list_for_tournament(self, tournament_id: UUID) -> Sequence[TournamentGolfer]: ...

    def remove(self, entity: TournamentGolfer) -> None: ...


@runtime_checkable
class TeamRepository(Repository[Team], Protocol):
    def list_for_tournament(self, tournament_id: UUID) -> Sequence[Team]: ...
