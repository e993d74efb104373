from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

from sqlalchemy.orm import Session

from football_import.core.config import Settings
from football_import.core.config import settings as default_settings
from football_import.db.engine import run_in_transaction
from football_import.db.models.core.competition import Competition
from football_import.db.models.core.team import Team
from football_import.db.repos.core.competition_repo import CompetitionRepository
from football_import.ingestion.providers.base.errors import (
    NotFoundError,
    SquadProcessingError,
    UpstreamError,
)
from football_import.ingestion.providers.football_data.client import (
    FootballDataClient,
    build_football_data_client,
)
from football_import.ingestion.providers.football_data.types import (
    CompetitionPayload,
    TeamPayload,
)
from football_import.ingestion.reconcile import Reconciler, ReconcileStats
from football_import.ingestion.status import ImportStatusTracker, default_tracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportLeagueResult:
    league_code: str
    teams_seen: int
    teams_processed: int
    teams_failed: int
    failed_teams: list[str]
    competitions_created: int
    teams_created: int
    players_created: int
    coaches_created: int
    placeholder_coaches_created: int
    members_dropped: int


def _format_failure_reason(exc: BaseException, *, max_len: int = 300) -> str:
    msg = str(exc).strip() or exc.__class__.__name__
    reason = f"{exc.__class__.__name__}: {msg}"
    if len(reason) > max_len:
        return f"{reason[: max_len - 3]}..."
    return reason


def normalize_league_code(league_code: str) -> str:
    code = league_code.strip().upper()
    if not code:
        raise ValueError("League code must not be empty.")
    return code


@dataclass
class LeagueImporter:
    """Imports one competition, a capped number of its teams and their squads.

    Teams are handled one after another in upstream order, with a fixed pause
    before every squad fetch to stay under the provider's request quota. A
    squad that cannot be fetched or stored is logged and skipped; anything
    else aborts the import and rolls back all of its writes.
    """

    client: FootballDataClient
    tracker: ImportStatusTracker = field(default_factory=lambda: default_tracker)
    request_delay_s: float = 6.0
    team_import_limit: int = 5

    _sleep: Callable[[float], Any] = field(default=time.sleep, repr=False)

    last_result: ImportLeagueResult | None = field(default=None, init=False)

    def import_league(self, session: Session, league_code: str) -> Competition:
        code = normalize_league_code(league_code)
        logger.info("Importing league %s", code)

        try:
            competition_payload = self._fetch_competition(code)
            competition_id = run_in_transaction(
                session, lambda s: self._import(s, code, competition_payload)
            )
            # Commit expires loaded state; reload outside the transaction scope.
            competition = CompetitionRepository(session).load_graph(competition_id)
            if competition is None:
                raise RuntimeError(f"Could not find competition after import: {code}")
        except Exception as exc:
            logger.error("Error importing league %s: %s", code, exc)
            self.tracker.fail(str(exc))
            raise

        self.tracker.complete()
        return competition

    def _fetch_competition(self, code: str) -> CompetitionPayload:
        try:
            payload = self.client.get_competition(code)
        except UpstreamError as e:
            if e.status_code == 404:
                raise NotFoundError(f"League with code {code} not found upstream") from e
            raise
        logger.info("Retrieved competition data for %s", payload.name)
        return payload

    def _import(
        self,
        session: Session,
        code: str,
        competition_payload: CompetitionPayload,
    ) -> int:
        reconciler = Reconciler(session)
        competition_repo = CompetitionRepository(session)

        competition = reconciler.reconcile_competition(competition_payload)

        teams = self.client.get_competition_teams(code).teams
        total_teams = min(len(teams), max(0, self.team_import_limit))
        logger.info(
            "Retrieved %d teams for %s; importing %d", len(teams), code, total_teams
        )
        self.tracker.start(code, total_teams)

        failed_teams: list[str] = []
        for index, team_payload in enumerate(teams[:total_teams]):
            logger.info("Processing team %s (%d/%d)", team_payload.name, index + 1, total_teams)
            self.tracker.advance(index)

            team = reconciler.reconcile_team(team_payload, competition)
            try:
                self._import_squad(session, reconciler, team, team_payload)
            except SquadProcessingError as exc:
                logger.error("%s", exc)
                failed_teams.append(team.name)

            reconciler.ensure_coach(team)

        competition_repo.save(competition)

        self.last_result = self._build_result(
            code,
            teams_seen=len(teams),
            teams_processed=total_teams,
            failed_teams=failed_teams,
            stats=reconciler.stats,
        )
        logger.info(
            "Completed importing %s: %d teams, %d squad failures",
            code,
            total_teams,
            len(failed_teams),
        )
        return competition.id

    def _import_squad(
        self,
        session: Session,
        reconciler: Reconciler,
        team: Team,
        team_payload: TeamPayload,
    ) -> None:
        if self.request_delay_s > 0:
            logger.debug(
                "Waiting %.1fs before fetching squad for %s", self.request_delay_s, team.name
            )
            self._sleep(self.request_delay_s)

        stats_before = replace(reconciler.stats)
        try:
            # SAVEPOINT: a squad that fails half-way leaves no partial rows behind.
            with session.begin_nested():
                squad = self.client.get_team_squad(team_payload.id)
                result = reconciler.reconcile_squad(team, squad)
        except Exception as exc:
            reconciler.stats = stats_before
            raise SquadProcessingError(team.name, _format_failure_reason(exc)) from exc

        logger.info(
            "Team %s: %d players (%d new), %d coaches (%d new) in squad, %d dropped",
            team.name,
            result.players_seen,
            result.players_created,
            result.coaches_seen,
            result.coaches_created,
            len(result.dropped),
        )

    @staticmethod
    def _build_result(
        code: str,
        *,
        teams_seen: int,
        teams_processed: int,
        failed_teams: list[str],
        stats: ReconcileStats,
    ) -> ImportLeagueResult:
        return ImportLeagueResult(
            league_code=code,
            teams_seen=teams_seen,
            teams_processed=teams_processed,
            teams_failed=len(failed_teams),
            failed_teams=list(failed_teams),
            competitions_created=stats.competitions_created,
            teams_created=stats.teams_created,
            players_created=stats.players_created,
            coaches_created=stats.coaches_created,
            placeholder_coaches_created=stats.placeholder_coaches_created,
            members_dropped=stats.members_dropped,
        )


def import_league(
    session: Session,
    league_code: str,
    *,
    client: FootballDataClient | None = None,
    tracker: ImportStatusTracker | None = None,
    settings: Settings | None = None,
) -> Competition:
    """Import `league_code` using configured pacing; builds a client when none is given."""

    cfg = settings or default_settings

    created_client: FootballDataClient | None = None
    if client is None:
        created_client = client = build_football_data_client(cfg)

    importer = LeagueImporter(
        client=client,
        tracker=tracker or default_tracker,
        request_delay_s=cfg.request_delay_s,
        team_import_limit=cfg.team_import_limit,
    )
    try:
        return importer.import_league(session, league_code)
    finally:
        if created_client is not None:
            created_client.close()
