"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, cast

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from fairway.adapters.sqlalchemy.mappings import (
    golfer_table,
    team_table,
    tournament_golfer_table,
    tournament_table,
)
from fairway.domain.errors import DuplicateRowError
from fairway.domain.model import Golfer, Team, Tournament, TournamentGolfer, TournamentStatus

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session

log = getLogger(__name__)


def _add_unique(session: Session, entity: object, description: str) -> None:
    """Insert ``entity`` in a savepoint so a unique-key clash leaves the session usable."""

    try:
        with session.begin_nested():
            session.add(entity)
    except IntegrityError as exc:
        log.debug("Duplicate %s: %s", description, exc.orig)
        raise DuplicateRowError(f"{description} already exists") from exc


class SqlAlchemyGolferRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Golfer) -> None:
        _add_unique(self.session, entity, f"golfer api_id={entity.api_id}")

    def get(self, golfer_id: UUID) -> Golfer | None:
        return self.session.get(Golfer, golfer_id)

    def get_by_api_id(self, api_id: int) -> Golfer | None:
        stmt = select(Golfer).where(golfer_table.c.api_id == api_id)
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyTournamentRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Tournament) -> None:
        self.session.add(entity)

    def get(self, tournament_id: UUID) -> Tournament | None:
        return self.session.get(Tournament, tournament_id)

    def find_active(self) -> Tournament | None:
        """The ``active`` tournament, else one flagged as in live play."""

        stmt = (
            select(Tournament)
            .where(tournament_table.c.status == TournamentStatus.ACTIVE)
            .order_by(tournament_table.c.start_date.desc())
            .limit(1)
        )
        tournament = self.session.execute(stmt).scalar_one_or_none()
        if tournament is not None:
            return tournament
        stmt = (
            select(Tournament)
            .where(tournament_table.c.live_play.is_(True))
            .order_by(tournament_table.c.start_date.desc())
            .limit(1)
        )
        return self.session.execute(stmt).scalar_one_or_none()


class SqlAlchemyTournamentGolferRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: TournamentGolfer) -> None:
        _add_unique(
            self.session,
            entity,
            f"participation golfer={entity.golfer_id} tournament={entity.tournament_id}",
        )

    def get_for(self, *, golfer_id: UUID, tournament_id: UUID) -> TournamentGolfer | None:
        stmt = (
            select(TournamentGolfer)
            .where(tournament_golfer_table.c.golfer_id == golfer_id)
            .where(tournament_golfer_table.c.tournament_id == tournament_id)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_tournament(self, tournament_id: UUID) -> Sequence[TournamentGolfer]:
        stmt = select(TournamentGolfer).where(
            tournament_golfer_table.c.tournament_id == tournament_id
        )
        return self.session.execute(stmt).scalars().all()

    def remove(self, entity: TournamentGolfer) -> None:
        self.session.delete(entity)


class SqlAlchemyTeamRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: Team) -> None:
        self.session.add(entity)

    def list_for_tournament(self, tournament_id: UUID) -> Sequence[Team]:
        stmt = select(Team).where(team_table.c.tournament_id == tournament_id)
        return self.session.execute(stmt).scalars().all()


if TYPE_CHECKING:
    from fairway.domain.ports.persistence import (
        GolferRepository,
        TeamRepository,
        TournamentGolferRepository,
        TournamentRepository,
    )

    _session_stub = cast("Session", object())
    _golfer_repo: GolferRepository = SqlAlchemyGolferRepository(_session_stub)
    _tournament_repo: TournamentRepository = SqlAlchemyTournamentRepository(_session_stub)
    _tg_repo: TournamentGolferRepository = SqlAlchemyTournamentGolferRepository(_session_stub)
    _team_repo: TeamRepository = SqlAlchemyTeamRepository(_session_stub)
