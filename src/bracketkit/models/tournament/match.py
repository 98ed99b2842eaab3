"""Match data class."""

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
from typing import Any, Dict, Optional, Tuple

from bracketkit.constants import MATCH_COMPLETED, MATCH_PENDING
from bracketkit.exceptions import InvalidScoreException
from bracketkit.utils import generate_id
from bracketkit.utils.dates import from_iso, to_iso


@dataclass
class MatchSide:
    """One side of a match: the team and its score."""

    team_id: str
    score: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"team_id": self.team_id, "score": self.score}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MatchSide":
        return cls(team_id=data["team_id"], score=data.get("score", 0))


@dataclass
class Match:
    """A scheduled game between two teams.

    Attributes
    ----------
    tournament_id : str
        ID of the owning tournament.
    round : int
        Round number (1-indexed).
    match_number : int
        Global sequence number of the match within its tournament.
    team1, team2 : MatchSide
        The two competing teams with their scores.
    scheduled_date : datetime or None
        Planned start of the match.
    status : str
        One of "pending", "ongoing", "completed" or "cancelled".
    winner : str or None
        ID of the team with the strictly higher score, once scores differ.
    id : str
        Unique match identifier.
    """

    tournament_id: str
    round: int
    match_number: int
    team1: MatchSide
    team2: MatchSide
    scheduled_date: Optional[datetime] = None
    status: str = MATCH_PENDING
    winner: Optional[str] = None
    id: str = field(default_factory=lambda: generate_id("Match"))

    @property
    def team_ids(self) -> Tuple[str, str]:
        return (self.team1.team_id, self.team2.team_id)

    @property
    def is_completed(self) -> bool:
        return self.status == MATCH_COMPLETED

    @property
    def loser(self) -> Optional[str]:
        """ID of the losing team, or None while no winner is known."""
        if self.winner is None:
            return None
        return (
            self.team2.team_id
            if self.winner == self.team1.team_id
            else self.team1.team_id
        )

    def side_of(self, team_id: str) -> MatchSide:
        """Return the side played by ``team_id``.

        Raises:
            InvalidScoreException: If the team does not play in this match
        """
        if self.team1.team_id == team_id:
            return self.team1
        if self.team2.team_id == team_id:
            return self.team2
        raise InvalidScoreException(f"Team {team_id} does not play in match {self.id}")

    def is_same_pair(self, team_a: str, team_b: str) -> bool:
        """True if the match is between the two given teams, in either order."""
        return {team_a, team_b} == set(self.team_ids)

    def has_result(self, team1_score: int, team2_score: int) -> bool:
        """True if this exact final result is already recorded."""
        return (
            self.is_completed
            and self.team1.score == team1_score
            and self.team2.score == team2_score
        )

    def _decide_winner(self) -> None:
        if self.team1.score > self.team2.score:
            self.winner = self.team1.team_id
        elif self.team2.score > self.team1.score:
            self.winner = self.team2.team_id

    def update_score(self, team_id: str, score: int) -> None:
        """Set one team's live score without completing the match.

        The winner follows the higher score whenever the scores differ.
        """
        self.side_of(team_id).score = score
        self._decide_winner()

    def complete(self, team1_score: int, team2_score: int) -> None:
        """Record the final score and mark the match completed.

        Raises:
            InvalidScoreException: If the scores are equal
        """
        if team1_score == team2_score:
            raise InvalidScoreException(
                "Scores cannot be equal. There must be a winner."
            )
        self.team1.score = team1_score
        self.team2.score = team2_score
        self._decide_winner()
        self.status = MATCH_COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "tournament_id": self.tournament_id,
            "round": self.round,
            "match_number": self.match_number,
            "team1": self.team1.to_dict(),
            "team2": self.team2.to_dict(),
            "scheduled_date": to_iso(self.scheduled_date),
            "status": self.status,
            "winner": self.winner,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary."""
        return cls(
            id=data["id"],
            tournament_id=data["tournament_id"],
            round=data.get("round", 1),
            match_number=data["match_number"],
            team1=MatchSide.from_dict(data["team1"]),
            team2=MatchSide.from_dict(data["team2"]),
            scheduled_date=from_iso(data.get("scheduled_date")),
            status=data.get("status", MATCH_PENDING),
            winner=data.get("winner"),
        )
