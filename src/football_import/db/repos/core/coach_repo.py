from __future__ import annotations

from sqlalchemy.orm import Session

from football_import.db.models.core.coach import Coach
from football_import.db.repos.base import BaseRepository


class CoachRepository(BaseRepository[Coach]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Coach)

    def find_in_team(self, name: str, team_id: int) -> Coach | None:
        return self.find_one(Coach.name == name, Coach.team_id == team_id)
