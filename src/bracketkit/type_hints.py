"""Type hints used in Bracketkit."""

from typing import Dict, Literal, Tuple

# Tournament format literals
TournamentFormat = Literal["single-elimination", "double-elimination", "round-robin"]

# Status literals
TournamentStatus = Literal["upcoming", "ongoing", "completed", "cancelled"]
AdmissionStatus = Literal["registered", "confirmed", "eliminated", "withdrawn"]
MatchStatus = Literal["pending", "ongoing", "completed", "cancelled"]

# Bracket side a winner lands on
Side = Literal["team1", "team2"]

# Notification event literals
EventKind = Literal[
    "bracket_generated",
    "tournament_started",
    "tournament_completed",
    "team_approved",
    "team_rejected",
]

TeamId = str
# Pair of team ids playing one match
TeamPair = Tuple[TeamId, TeamId]
# Team id -> display name
TeamNames = Dict[TeamId, str]
