from bracketkit.models.team import Team
from bracketkit.models.tournament import (
    AutoStatus,
    Bracket,
    BracketMatch,
    BracketRound,
    BracketSlot,
    ManualStatus,
    Match,
    MatchSide,
    RegisteredTeam,
    Standing,
    Tournament,
)

__all__ = [
    "Team",
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
]
