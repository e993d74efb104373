from __future__ import annotations

from sqlalchemy import ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from football_import.db.base import Base, TimestampMixin


class Player(Base, TimestampMixin):
    __tablename__ = "players"

    id: Mapped[int] = mapped_column(primary_key=True)

    team_id: Mapped[int] = mapped_column(
        ForeignKey("teams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String, nullable=False)
    position: Mapped[str] = mapped_column(String, nullable=False, default="Unknown")
    # Kept as delivered upstream (YYYY-MM-DD).
    date_of_birth: Mapped[str | None] = mapped_column(String(32), nullable=True)
    nationality: Mapped[str] = mapped_column(String, nullable=False, default="Unknown")

    team: Mapped[Team] = relationship(back_populates="players")

    __table_args__ = (UniqueConstraint("team_id", "name", name="uq_players_team_name"),)


from football_import.db.models.core.team import Team  # noqa: E402
