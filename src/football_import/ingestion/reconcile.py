from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from football_import.db.models.core.coach import Coach
from football_import.db.models.core.competition import Competition
from football_import.db.models.core.player import Player
from football_import.db.models.core.team import Team
from football_import.db.repos.core.coach_repo import CoachRepository
from football_import.db.repos.core.competition_repo import CompetitionRepository
from football_import.db.repos.core.player_repo import PlayerRepository
from football_import.db.repos.core.team_repo import TeamRepository
from football_import.ingestion.providers.football_data.types import (
    CoachPayload,
    CompetitionPayload,
    SquadMemberPayload,
    SquadRole,
    TeamPayload,
    TeamSquadPayload,
    classify_squad_member,
)

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


def placeholder_coach_name(team_name: str) -> str:
    return f"Coach of {team_name}"


@dataclass
class ReconcileStats:
    competitions_created: int = 0
    teams_created: int = 0
    teams_linked: int = 0
    players_created: int = 0
    coaches_created: int = 0
    placeholder_coaches_created: int = 0
    members_dropped: int = 0


@dataclass
class SquadResult:
    players_created: int = 0
    coaches_created: int = 0
    players_seen: int = 0
    coaches_seen: int = 0
    dropped: list[str] = field(default_factory=list)


class Reconciler:
    """Find-or-create upserts keyed by natural keys.

    Competition by `code`, Team by `name`, Player/Coach by `(name, team)`.
    Existing rows are returned untouched: the first import to see an entity
    decides its field values.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self.competitions = CompetitionRepository(session)
        self.teams = TeamRepository(session)
        self.players = PlayerRepository(session)
        self.coaches = CoachRepository(session)
        self.stats = ReconcileStats()

    def reconcile_competition(self, payload: CompetitionPayload) -> Competition:
        competition = self.competitions.find_by_code(payload.code, relations=("teams",))
        if competition is not None:
            logger.info("Competition %s already exists", payload.code)
            return competition

        logger.info("Creating competition %s (%s)", payload.name, payload.code)
        self.stats.competitions_created += 1
        return self.competitions.create(
            name=payload.name,
            code=payload.code,
            area_name=payload.area_name,
            teams=[],
        )

    def reconcile_team(self, payload: TeamPayload, competition: Competition) -> Team:
        team = self.teams.find_by_name(payload.name, relations=("competitions",))
        if team is None:
            logger.info("Creating team %s", payload.name)
            self.stats.teams_created += 1
            team = self.teams.create(
                name=payload.name,
                tla=payload.tla,
                short_name=payload.short_name,
                area_name=payload.area_name,
                address=payload.address,
                competitions=[competition],
            )
        elif competition not in team.competitions:
            logger.info("Linking team %s to competition %s", team.name, competition.code)
            self.stats.teams_linked += 1
            team.competitions.append(competition)

        # No single owning side on the many-to-many; keep both collections in step.
        if team not in competition.teams:
            competition.teams.append(team)

        self.session.flush()
        return team

    def reconcile_coach(self, payload: CoachPayload | SquadMemberPayload, team: Team) -> Coach:
        name = payload.name or placeholder_coach_name(team.name)
        coach = self.coaches.find_in_team(name, team.id)
        if coach is not None:
            return coach

        logger.info("Adding coach %s to team %s", name, team.name)
        self.stats.coaches_created += 1
        return self.coaches.create(
            name=name,
            date_of_birth=payload.date_of_birth or None,
            nationality=payload.nationality or UNKNOWN,
            team=team,
        )

    def reconcile_player(self, payload: SquadMemberPayload, team: Team) -> Player:
        player = self.players.find_in_team(payload.name, team.id)
        if player is not None:
            return player

        logger.info("Adding player %s to team %s", payload.name, team.name)
        self.stats.players_created += 1
        return self.players.create(
            name=payload.name,
            position=payload.position or UNKNOWN,
            date_of_birth=payload.date_of_birth or None,
            nationality=payload.nationality or UNKNOWN,
            team=team,
        )

    def reconcile_squad(self, team: Team, squad: TeamSquadPayload) -> SquadResult:
        """Reconcile the top-level coach, then squad members in payload order."""

        result = SquadResult()
        players_before = self.stats.players_created
        coaches_before = self.stats.coaches_created

        coach = squad.named_coach
        if coach is not None:
            self.reconcile_coach(coach, team)
            result.coaches_seen += 1

        for member in squad.squad:
            role = classify_squad_member(member)
            if role is SquadRole.PLAYER:
                self.reconcile_player(member, team)
                result.players_seen += 1
            elif role is SquadRole.COACH:
                self.reconcile_coach(member, team)
                result.coaches_seen += 1
            else:
                logger.warning(
                    "Dropping squad member %s of %s: unknown role %r",
                    member.name,
                    team.name,
                    member.role,
                )
                self.stats.members_dropped += 1
                result.dropped.append(member.name)

        result.players_created = self.stats.players_created - players_before
        result.coaches_created = self.stats.coaches_created - coaches_before
        return result

    def ensure_coach(self, team: Team) -> Coach | None:
        """Give `team` a placeholder coach when it has none at all."""

        if self.coaches.find_one(Coach.team_id == team.id) is not None:
            return None

        name = placeholder_coach_name(team.name)
        logger.info("No coach data for %s, creating placeholder", team.name)
        self.stats.placeholder_coaches_created += 1
        return self.coaches.create(
            name=name,
            date_of_birth=None,
            nationality=UNKNOWN,
            team=team,
        )
