from __future__ import annotations

import json

import typer

from football_import.cli.common import session_scope
from football_import.core.config import settings
from football_import.ingestion.import_league import LeagueImporter
from football_import.ingestion.providers.base.errors import NotFoundError, ProviderError
from football_import.ingestion.providers.football_data.client import build_football_data_client
from football_import.ingestion.status import default_tracker

app = typer.Typer(help="Import provider data into the local DB.")


@app.command("league")
def ingest_league_cmd(
    code: str = typer.Option(..., "--code", help="football-data.org competition code (e.g. PL)."),
    team_limit: int | None = typer.Option(
        None,
        "--team-limit",
        help="Max teams to import (defaults to TEAM_IMPORT_LIMIT).",
    ),
    request_delay: float | None = typer.Option(
        None,
        "--request-delay",
        help="Seconds to wait before each squad request (defaults to REQUEST_DELAY_S).",
    ),
) -> None:
    """Fetch a competition, its teams and their squads, and upsert them."""

    try:
        client = build_football_data_client(settings)
    except RuntimeError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=2) from e

    importer = LeagueImporter(
        client=client,
        tracker=default_tracker,
        request_delay_s=settings.request_delay_s if request_delay is None else request_delay,
        team_import_limit=settings.team_import_limit if team_limit is None else team_limit,
    )

    try:
        with session_scope() as session:
            competition = importer.import_league(session, code)
            summary = (
                f"Imported {competition.code} ({competition.name}): "
                f"teams={len(competition.teams)}"
            )
    except (NotFoundError, ProviderError, ValueError) as e:
        typer.echo(f"Import failed: {e}", err=True)
        typer.echo(json.dumps(default_tracker.get_status().to_dict()), err=True)
        raise typer.Exit(code=1) from e
    finally:
        client.close()

    result = importer.last_result
    if result is not None:
        typer.echo(
            " ".join(
                [
                    summary,
                    f"teams_created={result.teams_created}",
                    f"players_created={result.players_created}",
                    f"coaches_created={result.coaches_created}",
                    f"placeholder_coaches={result.placeholder_coaches_created}",
                    f"dropped={result.members_dropped}",
                    f"squad_failures={result.teams_failed}",
                ]
            )
        )
        for name in result.failed_teams:
            typer.echo(f"  squad failed: {name}")
    else:
        typer.echo(summary)

    typer.echo(json.dumps(default_tracker.get_status().to_dict()))
