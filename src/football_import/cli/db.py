from __future__ import annotations

import typer

import football_import.db.models  # noqa: F401
from football_import.core.config import settings
from football_import.db import Base, DatabaseConfig, create_db_engine

app = typer.Typer(help="Local database helpers.")


@app.command("init")
def init_db_cmd() -> None:
    """Create all tables directly (use alembic for managed databases)."""

    engine = create_db_engine(
        DatabaseConfig(database_url=settings.database_url, echo=settings.db_echo)
    )
    try:
        Base.metadata.create_all(engine)
    finally:
        engine.dispose()
    typer.echo(f"Initialized schema at {settings.database_url}")
