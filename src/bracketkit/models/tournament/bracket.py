"""Data model for the elimination bracket."""

# Bracketkit
# Copyright (C) 2025  Bracketkit developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from bracketkit.constants import MATCH_COMPLETED, MATCH_PENDING, TBD_NAME
from bracketkit.type_hints import Side
from bracketkit.utils.dates import from_iso, to_iso


@dataclass
class BracketSlot:
    """A team position in a bracket match, or a TBD placeholder."""

    team_id: Optional[str] = None
    name: str = TBD_NAME
    score: int = 0

    @property
    def is_known(self) -> bool:
        return self.team_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {"team_id": self.team_id, "name": self.name, "score": self.score}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BracketSlot":
        return cls(
            team_id=data.get("team_id"),
            name=data.get("name", TBD_NAME),
            score=data.get("score", 0),
        )


@dataclass
class BracketMatch:
    """A match node in one bracket round.

    Attributes
    ----------
    position : int
        Index of the match within its round. The winner moves to position
        ``position // 2`` of the next round.
    team1, team2 : BracketSlot
        Competing teams; unknown teams are TBD slots.
    match_id : str or None
        ID of the persisted match, once both teams are known.
    winner : str or None
        ID of the winning team.
    status : str
        Match status mirrored from the persisted match.
    scheduled_date : datetime or None
        Planned start, mirrored from the persisted match.
    """

    position: int
    team1: BracketSlot = field(default_factory=BracketSlot)
    team2: BracketSlot = field(default_factory=BracketSlot)
    match_id: Optional[str] = None
    winner: Optional[str] = None
    status: str = MATCH_PENDING
    scheduled_date: Optional[datetime] = None

    @property
    def has_both_teams(self) -> bool:
        return self.team1.is_known and self.team2.is_known

    @property
    def is_completed(self) -> bool:
        return self.status == MATCH_COMPLETED

    def slot(self, side: Side) -> BracketSlot:
        return self.team1 if side == "team1" else self.team2

    def set_slot(self, side: Side, slot: BracketSlot) -> None:
        if side == "team1":
            self.team1 = slot
        else:
            self.team2 = slot

    def to_dict(self) -> Dict[str, Any]:
        """Serialize bracket match to dictionary."""
        return {
            "match_id": self.match_id,
            "position": self.position,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "winner": self.winner,
            "status": self.status,
            "scheduled_date": to_iso(self.scheduled_date),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BracketMatch":
        """Deserialize bracket match from dictionary."""
        return cls(
            position=data["position"],
            team1=BracketSlot.from_dict(data.get("team1", {})),
            team2=BracketSlot.from_dict(data.get("team2", {})),
            match_id=data.get("match_id"),
            winner=data.get("winner"),
            status=data.get("status", MATCH_PENDING),
            scheduled_date=from_iso(data.get("scheduled_date")),
        )


@dataclass
class BracketRound:
    """Container for one layer of the bracket.

    Attributes
    ----------
    round : int
        Round number (1-indexed).
    name : str
        Display name derived from the distance to the final.
    matches : list of BracketMatch
        Matches ordered by position.
    byes : list of BracketSlot
        Teams advanced from this round without playing.
    """

    round: int
    name: str
    matches: List[BracketMatch] = field(default_factory=list)
    byes: List[BracketSlot] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round": self.round,
            "name": self.name,
            "matches": [m.to_dict() for m in self.matches],
            "byes": [b.to_dict() for b in self.byes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BracketRound":
        return cls(
            round=data["round"],
            name=data["name"],
            matches=[BracketMatch.from_dict(m) for m in data.get("matches", [])],
            byes=[BracketSlot.from_dict(b) for b in data.get("byes", [])],
        )


@dataclass
class Bracket:
    """The elimination tree of a tournament."""

    format: str
    total_rounds: int
    rounds: List[BracketRound] = field(default_factory=list)

    def get_round(self, round_number: int) -> Optional[BracketRound]:
        """Get a round by number (1-indexed), or None if it does not exist."""
        if 1 <= round_number <= len(self.rounds):
            return self.rounds[round_number - 1]
        return None

    def find_match(self, match_id: str) -> Optional[Tuple[BracketRound, BracketMatch]]:
        """Locate the bracket match linked to a persisted match."""
        for bracket_round in self.rounds:
            for bracket_match in bracket_round.matches:
                if bracket_match.match_id == match_id:
                    return bracket_round, bracket_match
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize bracket to dictionary."""
        return {
            "format": self.format,
            "total_rounds": self.total_rounds,
            "rounds": [r.to_dict() for r in self.rounds],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bracket":
        """Deserialize bracket from dictionary."""
        return cls(
            format=data["format"],
            total_rounds=data["total_rounds"],
            rounds=[BracketRound.from_dict(r) for r in data.get("rounds", [])],
        )
