from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from football_import.db.models.core.coach import Coach
from football_import.db.models.core.competition import Competition
from football_import.db.models.core.player import Player
from football_import.db.models.core.team import Team
from football_import.db.repos.core.coach_repo import CoachRepository
from football_import.db.repos.core.competition_repo import FULL_GRAPH, CompetitionRepository
from football_import.db.repos.core.player_repo import PlayerRepository
from football_import.db.repos.core.team_repo import TeamRepository
from football_import.ingestion.providers.base.errors import NotFoundError
from football_import.ingestion.status import ImportStatus, ImportStatusTracker, default_tracker


def list_competitions(session: Session) -> list[Competition]:
    return CompetitionRepository(session).list()


def list_teams(session: Session) -> list[Team]:
    return TeamRepository(session).list()


def list_players(session: Session) -> list[Player]:
    return PlayerRepository(session).list()


def list_coaches(session: Session) -> list[Coach]:
    return CoachRepository(session).list()


def get_competition(session: Session, code: str) -> Competition:
    competition = CompetitionRepository(session).find_by_code(code, relations=FULL_GRAPH)
    if competition is None:
        raise NotFoundError(f"League with code {code} not found")
    return competition


def get_team(session: Session, name: str) -> Team:
    team = TeamRepository(session).find_by_name(
        name, relations=("players", "coaches", "competitions")
    )
    if team is None:
        raise NotFoundError(f"Team with name {name} not found")
    return team


def _league_team_ids(session: Session, league_code: str, team_name: str | None) -> list[int]:
    competition = CompetitionRepository(session).find_by_code(league_code, relations=("teams",))
    if competition is None:
        raise NotFoundError(f"League with code {league_code} not found")
    return [t.id for t in competition.teams if team_name is None or t.name == team_name]


def players_for_league(
    session: Session, league_code: str, team_name: str | None = None
) -> list[Player]:
    """Players of every team in the league, optionally narrowed to one team by name."""

    team_ids = _league_team_ids(session, league_code, team_name)
    if not team_ids:
        return []
    stmt = (
        select(Player)
        .where(Player.team_id.in_(team_ids))
        .order_by(Player.team_id, Player.id)
    )
    return list(session.execute(stmt).scalars().all())


def coaches_for_league(
    session: Session, league_code: str, team_name: str | None = None
) -> list[Coach]:
    team_ids = _league_team_ids(session, league_code, team_name)
    if not team_ids:
        return []
    stmt = (
        select(Coach)
        .where(Coach.team_id.in_(team_ids))
        .order_by(Coach.team_id, Coach.id)
    )
    return list(session.execute(stmt).scalars().all())


def get_import_status(tracker: ImportStatusTracker | None = None) -> ImportStatus:
    return (tracker or default_tracker).get_status()
