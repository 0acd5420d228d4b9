"""SQLAlchemy mapping metadata for the fairway domain model."""

from __future__ import annotations

import json
import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from fairway.domain.model import Golfer, Team, Tournament, TournamentGolfer, TournamentStatus

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


class ApiIdList(TypeDecorator[list[int]]):
    """Golfer ``api_id`` roster stored as a JSON array."""

    impl = String
    cache_ok = True

    def process_bind_param(self, value: list[int] | None, dialect: Dialect) -> str | None:
        _ = dialect
        if value is None:
            return None
        return json.dumps([int(api_id) for api_id in value])

    def process_result_value(self, value: str | None, dialect: Dialect) -> list[int]:
        _ = dialect
        if value is None:
            return []
        loaded = json.loads(value)
        if not isinstance(loaded, list):
            return []
        items = cast(list[Any], loaded)
        return [int(item) for item in items]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

golfer_table = Table(
    "golfer",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("api_id", Integer, nullable=False, unique=True),
    Column("player_name", String, nullable=False),
    Column("country", String, nullable=True),
    Column("world_rank", Integer, nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

tournament_table = Table(
    "tournament",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("name", String, nullable=False),
    Column("start_date", UTCDateTime(), nullable=False),
    Column("end_date", UTCDateTime(), nullable=True),
    Column("status", Enum(TournamentStatus, native_enum=False), nullable=False, index=True),
    Column("current_round", Integer, nullable=True),
    Column("live_play", Boolean, nullable=False, default=False),
    Column("leaderboard_updated_at", UTCDateTime(), nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
)

tournament_golfer_table = Table(
    "tournament_golfer",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column("golfer_id", UUIDColumnType, ForeignKey("golfer.id"), nullable=False),
    Column(
        "tournament_id",
        UUIDColumnType,
        ForeignKey("tournament.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("position", String, nullable=True),
    Column("pos_change", Integer, nullable=True),
    Column("score", Float, nullable=True),
    Column("today", Float, nullable=True),
    Column("thru", Integer, nullable=True),
    Column("round", Integer, nullable=True),
    Column("end_hole", Integer, nullable=True),
    Column("round_one", Float, nullable=True),
    Column("round_two", Float, nullable=True),
    Column("round_three", Float, nullable=True),
    Column("round_four", Float, nullable=True),
    Column("round_one_tee_time", String, nullable=True),
    Column("round_two_tee_time", String, nullable=True),
    Column("round_three_tee_time", String, nullable=True),
    Column("round_four_tee_time", String, nullable=True),
    Column("make_cut", Float, nullable=True),
    Column("top_ten", Float, nullable=True),
    Column("top_twenty", Float, nullable=True),
    Column("win", Float, nullable=True),
    Column("world_rank", Integer, nullable=True),
    Column("rating", Float, nullable=True),
    Column("usage", Float, nullable=True),
    Column("updated_at", UTCDateTime(), nullable=True),
    UniqueConstraint("golfer_id", "tournament_id", name="uq_tournament_golfer_pair"),
)

team_table = Table(
    "team",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True, default=uuid.uuid4),
    Column(
        "tournament_id",
        UUIDColumnType,
        ForeignKey("tournament.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    Column("owner", String, nullable=True),
    Column("golfer_api_ids", ApiIdList(), nullable=False),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(Golfer, golfer_table)
    mapper_registry.map_imperatively(Tournament, tournament_table)
    mapper_registry.map_imperatively(TournamentGolfer, tournament_golfer_table)
    mapper_registry.map_imperatively(Team, team_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
