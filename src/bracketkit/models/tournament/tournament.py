"""Tournament data class - the state every manager operates on.

Managers never mutate a tournament they are handed; they work on
:meth:`Tournament.copy` and return the updated value.
"""

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

import copy
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from bracketkit.constants import DEFAULT_FORMAT, ELIMINATION_FORMATS
from bracketkit.utils import generate_id
from bracketkit.utils.dates import from_iso, to_iso, utcnow

from .bracket import Bracket
from .registration import RegisteredTeam, Standing
from .status_control import (
    AutoStatus,
    StatusControl,
    status_control_from_dict,
    status_control_to_dict,
)


@dataclass
class Tournament:
    """A competition instance with a format, capacity and lifecycle status.

    Attributes
    ----------
    name : str
        Tournament name.
    start_date, end_date : datetime
        Calendar window used while the status follows the dates.
    max_teams : int
        Registration capacity.
    format : str
        "single-elimination", "double-elimination" or "round-robin".
    status_control : AutoStatus or ManualStatus
        Current status and whether it was set explicitly.
    registered_teams : list of RegisteredTeam
        Registrations in admission order.
    match_ids : list of str
        IDs of the tournament's persisted matches, in creation order.
    standings : list of Standing
        One row per registered team.
    bracket : Bracket or None
        Elimination tree, once generated.
    winner : str or None
        Champion, set when the final is recorded.
    version : int
        Incremented by the repository on every save.
    """

    name: str
    start_date: datetime
    end_date: datetime
    max_teams: int
    format: str = DEFAULT_FORMAT
    game: Optional[str] = None
    description: str = ""
    rules: str = "Standard tournament rules apply"
    prize_pool: str = ""
    status_control: StatusControl = field(default_factory=AutoStatus)
    registered_teams: List[RegisteredTeam] = field(default_factory=list)
    match_ids: List[str] = field(default_factory=list)
    standings: List[Standing] = field(default_factory=list)
    bracket: Optional[Bracket] = None
    winner: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    version: int = 0
    id: str = field(default_factory=lambda: generate_id("Tournament"))

    # ========== Properties ==========

    @property
    def status(self) -> str:
        """Get the current status."""
        return self.status_control.status

    @property
    def manual_override(self) -> bool:
        """True once an explicit lifecycle action set the status."""
        return self.status_control.manual

    @property
    def is_elimination(self) -> bool:
        return self.format in ELIMINATION_FORMATS

    @property
    def has_schedule(self) -> bool:
        return bool(self.match_ids)

    # ========== Lookups ==========

    def get_registration(self, team_id: str) -> Optional[RegisteredTeam]:
        for registration in self.registered_teams:
            if registration.team_id == team_id:
                return registration
        return None

    def get_standing(self, team_id: str) -> Optional[Standing]:
        for standing in self.standings:
            if standing.team_id == team_id:
                return standing
        return None

    def is_registered(self, team_id: str) -> bool:
        return self.get_registration(team_id) is not None

    def copy(self) -> "Tournament":
        """Deep copy used by managers before applying changes."""
        return copy.deepcopy(self)

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary.

        Returns:
            Dictionary containing all tournament data
        """
        return {
            "id": self.id,
            "name": self.name,
            "game": self.game,
            "description": self.description,
            "rules": self.rules,
            "prize_pool": self.prize_pool,
            "start_date": to_iso(self.start_date),
            "end_date": to_iso(self.end_date),
            "max_teams": self.max_teams,
            "format": self.format,
            "status_control": status_control_to_dict(self.status_control),
            "registered_teams": [r.to_dict() for r in self.registered_teams],
            "match_ids": list(self.match_ids),
            "standings": [s.to_dict() for s in self.standings],
            "bracket": self.bracket.to_dict() if self.bracket else None,
            "winner": self.winner,
            "created_at": to_iso(self.created_at),
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tournament":
        """Deserialize tournament from dictionary.

        Args:
            data: Dictionary containing tournament data

        Returns:
            Reconstructed Tournament object
        """
        bracket_data = data.get("bracket")
        return cls(
            id=data["id"],
            name=data["name"],
            game=data.get("game"),
            description=data.get("description", ""),
            rules=data.get("rules", "Standard tournament rules apply"),
            prize_pool=data.get("prize_pool", ""),
            start_date=from_iso(data["start_date"]),
            end_date=from_iso(data["end_date"]),
            max_teams=data["max_teams"],
            format=data.get("format", DEFAULT_FORMAT),
            status_control=status_control_from_dict(data.get("status_control", {})),
            registered_teams=[
                RegisteredTeam.from_dict(r) for r in data.get("registered_teams", [])
            ],
            match_ids=list(data.get("match_ids", [])),
            standings=[Standing.from_dict(s) for s in data.get("standings", [])],
            bracket=Bracket.from_dict(bracket_data) if bracket_data else None,
            winner=data.get("winner"),
            created_at=from_iso(data.get("created_at")) or utcnow(),
            version=data.get("version", 0),
        )
