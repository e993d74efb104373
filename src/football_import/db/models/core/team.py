from __future__ import annotations

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_import.db.base import Base, TimestampMixin
from football_import.db.models.core.competition_team import competition_teams


class Team(Base, TimestampMixin):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(primary_key=True)

    # Natural key across imports; the upstream team id is not persisted.
    name: Mapped[str] = mapped_column(String, nullable=False, unique=True)

    tla: Mapped[str | None] = mapped_column(String(8), nullable=True)
    short_name: Mapped[str | None] = mapped_column(String, nullable=True)
    area_name: Mapped[str | None] = mapped_column(String, nullable=True)
    address: Mapped[str | None] = mapped_column(String, nullable=True)

    competitions: Mapped[list[Competition]] = relationship(
        secondary=competition_teams,
        back_populates="teams",
        order_by="Competition.id",
    )

    players: Mapped[list[Player]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Player.id",
    )
    coaches: Mapped[list[Coach]] = relationship(
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="Coach.id",
    )


from football_import.db.models.core.coach import Coach  # noqa: E402
from football_import.db.models.core.competition import Competition  # noqa: E402
from football_import.db.models.core.player import Player  # noqa: E402
