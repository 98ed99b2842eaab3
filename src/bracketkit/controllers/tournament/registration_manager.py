"""Team admission for tournaments.

This module owns a tournament's registration list and the parallel standings
list, keeping both in step as teams are admitted, approved or removed.
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

from datetime import datetime
from typing import List

from bracketkit.constants import (
    ADMISSION_CONFIRMED,
    ADMISSION_ELIMINATED,
    ADMISSION_WITHDRAWN,
    STATUS_UPCOMING,
)
from bracketkit.exceptions import (
    DuplicateRegistrationException,
    NotRegisteredException,
    RegistrationClosedException,
    TournamentFullException,
)
from bracketkit.models.tournament import RegisteredTeam, Standing, Tournament
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


def admitted_teams(tournament: Tournament) -> List[str]:
    """IDs of registered or confirmed teams, in registration order."""
    return [r.team_id for r in tournament.registered_teams if r.is_admitted]


class RegistrationManager:
    """Admits, approves and removes teams.

    Every method takes a tournament and returns an updated copy; the
    tournament passed in is left untouched.
    """

    def register(
        self, tournament: Tournament, team_id: str, now: datetime
    ) -> Tournament:
        """Admit a team into the tournament.

        Args:
            tournament: Tournament to register into
            team_id: ID of the team
            now: Registration time

        Returns:
            Updated tournament

        Raises:
            DuplicateRegistrationException: If the team is already registered
            TournamentFullException: If the tournament is at capacity
            RegistrationClosedException: If the tournament is not upcoming
        """
        if tournament.is_registered(team_id):
            raise DuplicateRegistrationException(
                f"Team {team_id} is already registered in {tournament.name}"
            )
        if len(tournament.registered_teams) >= tournament.max_teams:
            raise TournamentFullException(
                f"Tournament {tournament.name} is full ({tournament.max_teams} teams)"
            )
        if tournament.status != STATUS_UPCOMING:
            raise RegistrationClosedException(
                f"Registration is closed: tournament is {tournament.status}"
            )

        updated = tournament.copy()
        updated.registered_teams.append(
            RegisteredTeam(team_id=team_id, registered_at=now)
        )
        updated.standings.append(
            Standing(team_id=team_id, rank=len(updated.registered_teams))
        )
        logger.info(
            f"Registered team {team_id} in {tournament.name} "
            f"({len(updated.registered_teams)}/{tournament.max_teams})"
        )
        return updated

    def unregister(self, tournament: Tournament, team_id: str) -> Tournament:
        """Remove a team's registration and standing; no-op if absent."""
        updated = tournament.copy()
        updated.registered_teams = [
            r for r in updated.registered_teams if r.team_id != team_id
        ]
        updated.standings = [s for s in updated.standings if s.team_id != team_id]

        if len(updated.registered_teams) != len(tournament.registered_teams):
            logger.info(f"Removed team {team_id} from {tournament.name}")
        return updated

    def approve(self, tournament: Tournament, team_id: str) -> Tournament:
        """Confirm a pending registration.

        Raises:
            NotRegisteredException: If the team is not registered
        """
        return self._set_admission(tournament, team_id, ADMISSION_CONFIRMED)

    def reject(self, tournament: Tournament, team_id: str) -> Tournament:
        """Drop a registration entirely.

        Same state change as :meth:`unregister`; callers use it to signal an
        admin decision rather than a team leaving.
        """
        return self.unregister(tournament, team_id)

    def withdraw(self, tournament: Tournament, team_id: str) -> Tournament:
        """Mark a team as withdrawn; its standing row is kept."""
        return self._set_admission(tournament, team_id, ADMISSION_WITHDRAWN)

    def eliminate(self, tournament: Tournament, team_id: str) -> Tournament:
        """Mark a team as knocked out of an elimination bracket."""
        return self._set_admission(tournament, team_id, ADMISSION_ELIMINATED)

    def reinstate(self, tournament: Tournament, team_id: str) -> Tournament:
        """Undo an elimination after a corrected result; other statuses stay."""
        registration = tournament.get_registration(team_id)
        if registration is None or registration.admission_status != ADMISSION_ELIMINATED:
            return tournament
        return self._set_admission(tournament, team_id, ADMISSION_CONFIRMED)

    def _set_admission(
        self, tournament: Tournament, team_id: str, admission_status: str
    ) -> Tournament:
        if not tournament.is_registered(team_id):
            raise NotRegisteredException(
                f"Team {team_id} is not registered in {tournament.name}"
            )

        updated = tournament.copy()
        registration = updated.get_registration(team_id)
        registration.admission_status = admission_status
        logger.info(f"Team {team_id} is now {admission_status} in {tournament.name}")
        return updated
