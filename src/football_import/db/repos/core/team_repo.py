from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.orm import Session

from football_import.db.models.core.team import Team
from football_import.db.repos.base import BaseRepository


class TeamRepository(BaseRepository[Team]):
    def __init__(self, session: Session) -> None:
        super().__init__(session=session, model=Team)

    def find_by_name(self, name: str, *, relations: Sequence[str] = ()) -> Team | None:
        return self.find_one(Team.name == name, relations=relations)
