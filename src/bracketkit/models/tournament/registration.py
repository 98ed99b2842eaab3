"""Registration and standing records kept per team in a tournament."""

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

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict

from bracketkit.constants import ADMISSION_REGISTERED, ADMITTED_STATUSES
from bracketkit.utils.dates import from_iso, to_iso


@dataclass
class RegisteredTeam:
    """A team entry in a tournament's registration list.

    Attributes
    ----------
    team_id : str
        ID of the registered team.
    registered_at : datetime
        When the registration was accepted.
    admission_status : str
        One of "registered", "confirmed", "eliminated" or "withdrawn".
    """

    team_id: str
    registered_at: datetime
    admission_status: str = ADMISSION_REGISTERED

    @property
    def is_admitted(self) -> bool:
        """Registered or confirmed teams take part in scheduling."""
        return self.admission_status in ADMITTED_STATUSES

    def to_dict(self) -> Dict[str, Any]:
        """Serialize registration to dictionary."""
        return {
            "team_id": self.team_id,
            "registered_at": to_iso(self.registered_at),
            "admission_status": self.admission_status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegisteredTeam":
        """Deserialize registration from dictionary."""
        return cls(
            team_id=data["team_id"],
            registered_at=from_iso(data["registered_at"]),
            admission_status=data.get("admission_status", ADMISSION_REGISTERED),
        )


@dataclass
class Standing:
    """A team's aggregated results within a tournament."""

    team_id: str
    rank: int
    points: int = 0
    wins: int = 0
    losses: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize standing to dictionary."""
        return {
            "team_id": self.team_id,
            "rank": self.rank,
            "points": self.points,
            "wins": self.wins,
            "losses": self.losses,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Standing":
        """Deserialize standing from dictionary."""
        return cls(
            team_id=data["team_id"],
            rank=data.get("rank", 0),
            points=data.get("points", 0),
            wins=data.get("wins", 0),
            losses=data.get("losses", 0),
        )
