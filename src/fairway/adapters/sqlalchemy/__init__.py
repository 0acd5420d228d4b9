"""SQLAlchemy adapter package for fairway."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import (
    SqlAlchemyGolferRepository,
    SqlAlchemyTeamRepository,
    SqlAlchemyTournamentGolferRepository,
    SqlAlchemyTournamentRepository,
)
from .unit_of_work import (
    SqlAlchemyLiveSyncUnitOfWork,
    configure_engine,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyGolferRepository",
    "SqlAlchemyLiveSyncUnitOfWork",
    "SqlAlchemyTeamRepository",
    "SqlAlchemyTournamentGolferRepository",
    "SqlAlchemyTournamentRepository",
    "configure_engine",
    "create_all_tables",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
