from __future__ import annotations

from sqlalchemy.orm import Session

from football_import.db.models.core.player import Player
from football_import.db.repos.base import BaseRepository


class PlayerRepository(BaseRepository[Player]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Player)

    def find_in_team(self, name: str, team_id: int) -> Player | None:
        return self.find_one(Player.name == name, Player.team_id == team_id)
