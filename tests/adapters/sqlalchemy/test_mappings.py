from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import inspect, select, text
from sqlalchemy.engine import Engine  # noqa: TC002
from sqlalchemy.orm import Session  # noqa: TC002

from fairway.adapters.sqlalchemy.mappings import (
    ApiIdList,
    UTCDateTime,
    golfer_table,
    tournament_table,
)
from fairway.domain.model import Tournament, TournamentStatus


def test_tables_are_created(sqlite_engine: Engine) -> None:
    names = set(inspect(sqlite_engine).get_table_names())

    assert {"golfer", "tournament", "tournament_golfer", "team"} <= names


def test_participation_pair_is_unique(sqlite_engine: Engine) -> None:
    constraints = inspect(sqlite_engine).get_unique_constraints("tournament_golfer")

    assert any(
        set(constraint["column_names"]) == {"golfer_id", "tournament_id"}
        for constraint in constraints
    )
    assert golfer_table.c.api_id.unique


def test_tournament_round_trip_keeps_status_and_utc(sqlite_session: Session) -> None:
    tournament = Tournament(
        name="RBC Heritage",
        start_date=datetime(2025, 4, 17, 11, 0, tzinfo=UTC),
        status=TournamentStatus.ACTIVE,
        current_round=2,
    )
    sqlite_session.add(tournament)
    sqlite_session.commit()
    sqlite_session.expire_all()

    stored = sqlite_session.execute(
        select(Tournament).where(tournament_table.c.name == "RBC Heritage")
    ).scalar_one()

    assert stored.status is TournamentStatus.ACTIVE
    assert stored.start_date == datetime(2025, 4, 17, 11, 0, tzinfo=UTC)
    assert stored.start_date.tzinfo is not None
    assert stored.live_play is False


def test_savepoints_work_on_sqlite(sqlite_session: Session) -> None:
    sqlite_session.execute(text("SELECT 1"))
    with sqlite_session.begin_nested():
        sqlite_session.execute(text("SELECT 2"))
    sqlite_session.rollback()


def test_utc_datetime_normalizes_values() -> None:
    decorator = UTCDateTime()
    naive = datetime(2025, 4, 10, 8, 3)

    bound = decorator.process_bind_param(naive, dialect=None)  # type: ignore[arg-type]

    assert bound == datetime(2025, 4, 10, 8, 3, tzinfo=UTC)
    assert decorator.process_result_value(naive, dialect=None) == bound  # type: ignore[arg-type]
    assert decorator.process_bind_param(None, dialect=None) is None  # type: ignore[arg-type]


def test_api_id_list_serializes_as_json() -> None:
    decorator = ApiIdList()

    assert decorator.process_bind_param([3, 1], dialect=None) == "[3, 1]"  # type: ignore[arg-type]
    assert decorator.process_result_value("[3, 1]", dialect=None) == [3, 1]  # type: ignore[arg-type]
    assert decorator.process_result_value(None, dialect=None) == []  # type: ignore[arg-type]
    assert decorator.process_result_value('{"a": 1}', dialect=None) == []  # type: ignore[arg-type]
