from __future__ import annotations

import typer

from football_import.cli.db import app as db_app
from football_import.cli.ingest import app as ingest_app
from football_import.cli.query import app as query_app
from football_import.core.config import settings
from football_import.core.logging import configure_logging

app = typer.Typer(no_args_is_help=True)
app.add_typer(db_app, name="db")
app.add_typer(ingest_app, name="ingest")
app.add_typer(query_app, name="query")


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (defaults to LOG_LEVEL or INFO)."
    ),
) -> None:
    """Import football-data.org competitions, teams and squads into the local DB."""

    configure_logging(log_level or settings.log_level)
