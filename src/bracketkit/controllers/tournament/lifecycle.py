"""Tournament status state machine.

States run ``upcoming -> ongoing -> completed``; ``cancelled`` is reachable
from ``upcoming`` and ``ongoing``. While a tournament is under
:class:`AutoStatus` its status follows its dates; explicit transitions put it
under :class:`ManualStatus` and the dates stop applying.
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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from bracketkit.constants import (
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_ONGOING,
    STATUS_UPCOMING,
)
from bracketkit.controllers.tournament.bracket_engine import BracketEngine
from bracketkit.controllers.tournament.registration_manager import admitted_teams
from bracketkit.controllers.tournament.schedule_generator import ScheduleGenerator
from bracketkit.controllers.tournament.standings_calculator import StandingsCalculator
from bracketkit.exceptions import (
    InsufficientTeamsException,
    InvalidTransitionException,
)
from bracketkit.models.tournament import AutoStatus, ManualStatus, Match, Tournament
from bracketkit.type_hints import TeamNames
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


def compute_status_from_dates(now: datetime, start: datetime, end: datetime) -> str:
    """Status implied by the calendar alone.

    Returns:
        "upcoming" before ``start``, "ongoing" from ``start`` to ``end``
        inclusive, "completed" afterwards
    """
    if now < start:
        return STATUS_UPCOMING
    if now <= end:
        return STATUS_ONGOING
    return STATUS_COMPLETED


@dataclass
class StartOutcome:
    """Result of starting a tournament."""

    tournament: Tournament
    created_matches: List[Match] = field(default_factory=list)
    schedule_generated: bool = False
    bracket_generated: bool = False


@dataclass
class RecomputeResult:
    """Result of a batch status refresh."""

    changed: List[Tournament] = field(default_factory=list)
    total: int = 0

    @property
    def updated(self) -> int:
        return len(self.changed)


class TournamentLifecycle:
    """Gatekeeper for tournament status transitions."""

    def __init__(
        self,
        schedule_generator: Optional[ScheduleGenerator] = None,
        bracket_engine: Optional[BracketEngine] = None,
        standings: Optional[StandingsCalculator] = None,
    ):
        self.schedule_generator = schedule_generator or ScheduleGenerator()
        self.bracket_engine = bracket_engine or BracketEngine()
        self.standings = standings or StandingsCalculator()

    def refresh(self, tournament: Tournament, now: datetime) -> Tournament:
        """Recompute the status from dates unless it is manual or cancelled."""
        if tournament.manual_override or tournament.status == STATUS_CANCELLED:
            return tournament

        status = compute_status_from_dates(
            now, tournament.start_date, tournament.end_date
        )
        if status == tournament.status:
            return tournament

        updated = tournament.copy()
        updated.status_control = AutoStatus(status)
        logger.info(
            f"Tournament {tournament.name} moved from {tournament.status} "
            f"to {status} by date"
        )
        return updated

    def start(
        self,
        tournament: Tournament,
        matches: Sequence[Match],
        names: Optional[TeamNames] = None,
    ) -> StartOutcome:
        """Move an upcoming tournament to ongoing.

        Generates the schedule when the tournament has no matches yet, and
        the bracket for elimination formats that lack one.

        Raises:
            InvalidTransitionException: If the tournament is not upcoming
            InsufficientTeamsException: If fewer than two teams are admitted
        """
        if tournament.status != STATUS_UPCOMING:
            raise InvalidTransitionException(
                f"Cannot start tournament {tournament.name}: it is {tournament.status}"
            )
        team_count = len(admitted_teams(tournament))
        if team_count < 2:
            raise InsufficientTeamsException(
                f"Cannot start tournament {tournament.name} with {team_count} team(s)"
            )

        outcome = StartOutcome(tournament=tournament)
        all_matches = list(matches)

        if not tournament.has_schedule:
            outcome.tournament, created = self.schedule_generator.generate(
                outcome.tournament
            )
            outcome.created_matches.extend(created)
            all_matches.extend(created)
            outcome.schedule_generated = True

        if outcome.tournament.is_elimination and outcome.tournament.bracket is None:
            outcome.tournament, created = self.bracket_engine.generate(
                outcome.tournament, all_matches, names
            )
            outcome.created_matches.extend(created)
            outcome.bracket_generated = True

        started = outcome.tournament.copy()
        started.status_control = ManualStatus(STATUS_ONGOING)
        outcome.tournament = started
        logger.info(f"Started tournament {tournament.name} with {team_count} teams")
        return outcome

    def end(self, tournament: Tournament) -> Tournament:
        """Complete an ongoing tournament and finalise its ranks.

        Raises:
            InvalidTransitionException: If the tournament is not ongoing
        """
        if tournament.status != STATUS_ONGOING:
            raise InvalidTransitionException(
                f"Cannot end tournament {tournament.name}: it is {tournament.status}"
            )

        ended = self.standings.recompute(tournament)
        ended.status_control = ManualStatus(STATUS_COMPLETED)
        logger.info(f"Ended tournament {tournament.name}")
        return ended

    def cancel(self, tournament: Tournament) -> Tournament:
        """Cancel a tournament that has not completed.

        Raises:
            InvalidTransitionException: If the tournament is completed
        """
        if tournament.status == STATUS_COMPLETED:
            raise InvalidTransitionException(
                f"Cannot cancel tournament {tournament.name}: it is already completed"
            )

        cancelled = tournament.copy()
        cancelled.status_control = ManualStatus(STATUS_CANCELLED)
        logger.info(f"Cancelled tournament {tournament.name}")
        return cancelled

    def reset_override(self, tournament: Tournament, now: datetime) -> Tournament:
        """Hand status control back to the calendar and refresh immediately.

        A cancelled tournament stays cancelled.
        """
        released = tournament.copy()
        released.status_control = AutoStatus(tournament.status)
        logger.info(f"Cleared manual status override of {tournament.name}")
        return self.refresh(released, now)

    def recompute_all(
        self, tournaments: Iterable[Tournament], now: datetime
    ) -> RecomputeResult:
        """Refresh the status of every non-cancelled tournament."""
        result = RecomputeResult()
        for tournament in tournaments:
            if tournament.status == STATUS_CANCELLED:
                continue
            result.total += 1
            refreshed = self.refresh(tournament, now)
            if refreshed.status != tournament.status:
                result.changed.append(refreshed)

        logger.info(
            f"Status refresh updated {result.updated} of {result.total} tournaments"
        )
        return result
