from football_import.db.models.core.coach import Coach
from football_import.db.models.core.competition import Competition
from football_import.db.models.core.competition_team import competition_teams
from football_import.db.models.core.player import Player
from football_import.db.models.core.team import Team

__all__ = [
    "Coach",
    "Competition",
    "Player",
    "Team",
    "competition_teams",
]
