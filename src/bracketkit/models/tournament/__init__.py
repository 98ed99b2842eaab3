from bracketkit.models.tournament.bracket import (
    Bracket,
    BracketMatch,
    BracketRound,
    BracketSlot,
)
from bracketkit.models.tournament.match import Match, MatchSide
from bracketkit.models.tournament.registration import RegisteredTeam, Standing
from bracketkit.models.tournament.status_control import (
    AutoStatus,
    ManualStatus,
    StatusControl,
)
from bracketkit.models.tournament.tournament import Tournament

__all__ = [
    "Tournament",
    "RegisteredTeam",
    "Standing",
    "Match",
    "MatchSide",
    "Bracket",
    "BracketRound",
    "BracketMatch",
    "BracketSlot",
    "AutoStatus",
    "ManualStatus",
    "StatusControl",
]
