from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from football_import.db.models.core.competition import Competition
from football_import.db.repos.base import BaseRepository

FULL_GRAPH = ("teams.players", "teams.coaches", "teams.competitions")


class CompetitionRepository(BaseRepository[Competition]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Competition)

    def find_by_code(self, code: str, *, relations: Sequence[str] = ()) -> Competition | None:
        return self.find_one(Competition.code == code, relations=relations)

    def load_graph(self, competition_id: int) -> Competition | None:
        """Competition with teams, players and coaches eagerly loaded."""

        return self.find_one(
            Competition.id == competition_id,
            relations=FULL_GRAPH,
            populate_existing=True,
        )
