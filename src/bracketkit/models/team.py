"""Team roster entry."""

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
from typing import Any, Dict, Optional


@dataclass
class Team:
    """A team as known to the roster collaborator.

    Attributes
    ----------
    id : str
        Unique team identifier.
    name : str
        Display name used in bracket slots.
    game : str or None
        Game the team competes in; checked against the tournament's game.
    """

    id: str
    name: str
    game: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "game": self.game}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Team":
        return cls(id=data["id"], name=data.get("name", data["id"]), game=data.get("game"))
