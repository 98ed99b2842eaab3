"""Team roster collaborator."""

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

from abc import ABC, abstractmethod
from typing import Dict, Iterable, Optional

from bracketkit.models import Team
from bracketkit.type_hints import TeamNames


class TeamRoster(ABC):
    """Lookup of the teams known to the wider application."""

    @abstractmethod
    def get_team(self, team_id: str) -> Optional[Team]:
        pass

    def names_for(self, team_ids: Iterable[str]) -> TeamNames:
        """Display names for ``team_ids``; unknown teams map to their id."""
        names = {}
        for team_id in team_ids:
            team = self.get_team(team_id)
            names[team_id] = team.name if team else team_id
        return names


class InMemoryRoster(TeamRoster):
    """Roster held in a dictionary."""

    def __init__(self, teams: Iterable[Team] = ()):
        self._teams: Dict[str, Team] = {team.id: team for team in teams}

    def add(self, team: Team) -> None:
        self._teams[team.id] = team

    def get_team(self, team_id: str) -> Optional[Team]:
        return self._teams.get(team_id)
