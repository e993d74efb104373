from __future__ import annotations

import json

import typer

from football_import import queries
from football_import.cli.common import session_scope
from football_import.ingestion.providers.base.errors import NotFoundError

app = typer.Typer(help="Read imported data.")


@app.command("competitions")
def competitions_cmd() -> None:
    with session_scope() as session:
        for c in queries.list_competitions(session):
            typer.echo(f"{c.code}\t{c.name}\t{c.area_name}")


@app.command("teams")
def teams_cmd() -> None:
    with session_scope() as session:
        for t in queries.list_teams(session):
            typer.echo(f"{t.id}\t{t.name}\t{t.tla or ''}\t{t.area_name or ''}")


@app.command("players")
def players_cmd(
    league: str | None = typer.Option(None, "--league", help="Competition code filter."),
    team: str | None = typer.Option(None, "--team", help="Team name filter (needs --league)."),
) -> None:
    try:
        with session_scope() as session:
            players = (
                queries.players_for_league(session, league, team)
                if league
                else queries.list_players(session)
            )
            for p in players:
                typer.echo(f"{p.name}\t{p.position}\t{p.nationality}\t{p.date_of_birth or ''}")
    except NotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e


@app.command("coaches")
def coaches_cmd(
    league: str | None = typer.Option(None, "--league", help="Competition code filter."),
    team: str | None = typer.Option(None, "--team", help="Team name filter (needs --league)."),
) -> None:
    try:
        with session_scope() as session:
            coaches = (
                queries.coaches_for_league(session, league, team)
                if league
                else queries.list_coaches(session)
            )
            for c in coaches:
                typer.echo(f"{c.name}\t{c.nationality}\t{c.date_of_birth or ''}")
    except NotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e


@app.command("team")
def team_cmd(name: str = typer.Option(..., "--name", help="Exact team name.")) -> None:
    try:
        with session_scope() as session:
            t = queries.get_team(session, name)
            typer.echo(f"{t.name} ({t.tla or '-'}) {t.address or ''}")
            typer.echo("Competitions: " + ", ".join(c.code for c in t.competitions))
            typer.echo("Coaches: " + ", ".join(c.name for c in t.coaches))
            typer.echo(f"Players ({len(t.players)}):")
            for p in t.players:
                typer.echo(f"  {p.name}\t{p.position}")
    except NotFoundError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1) from e


@app.command("status")
def status_cmd() -> None:
    """Status of the last import run in this process (idle in a fresh process)."""

    typer.echo(json.dumps(queries.get_import_status().to_dict()))
