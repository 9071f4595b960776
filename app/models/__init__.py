from app.models.card_event import CardEvent
from app.models.league import League
from app.models.match import FINISHED_STATUSES, Match, MatchStatus
from app.models.match_stats import MatchStats
from app.models.referee import Referee
from app.models.referee_rating import RefereeRating
from app.models.referee_season_stats import RefereeSeasonStats
from app.models.team import Team

__all__ = [
    "League",
    "Team",
    "Referee",
    "Match",
    "MatchStatus",
    "FINISHED_STATUSES",
    "MatchStats",
    "CardEvent",
    "RefereeSeasonStats",
    "RefereeRating",
]
