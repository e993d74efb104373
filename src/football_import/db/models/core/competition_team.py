from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Table

from football_import.db.base import Base

# Non-owning many-to-many link: removing a competition never removes its teams.
competition_teams = Table(
    "competition_teams",
    Base.metadata,
    Column(
        "competition_id",
        ForeignKey("competitions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "team_id",
        ForeignKey("teams.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    ),
)
