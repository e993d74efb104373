from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_import.db.base import Base, TimestampMixin
from football_import.db.models.core.competition_team import competition_teams


class Competition(Base, TimestampMixin):
    __tablename__ = "competitions"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    code: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    area_name: Mapped[str] = mapped_column(String, nullable=False)

    teams: Mapped[list[Team]] = relationship(
        secondary=competition_teams,
        back_populates="competitions",
        order_by="Team.id",
    )


from football_import.db.models.core.team import Team  # noqa: E402
