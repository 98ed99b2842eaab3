"""Tournament managers: lifecycle, registration, scheduling, bracket and standings."""

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

from bracketkit.controllers.tournament.bracket_engine import (
    AdvanceOutcome,
    BracketEngine,
)
from bracketkit.controllers.tournament.lifecycle import (
    RecomputeResult,
    StartOutcome,
    TournamentLifecycle,
    compute_status_from_dates,
)
from bracketkit.controllers.tournament.registration_manager import (
    RegistrationManager,
    admitted_teams,
)
from bracketkit.controllers.tournament.schedule_generator import ScheduleGenerator
from bracketkit.controllers.tournament.standings_calculator import StandingsCalculator

__all__ = [
    "TournamentLifecycle",
    "RegistrationManager",
    "ScheduleGenerator",
    "BracketEngine",
    "StandingsCalculator",
    "AdvanceOutcome",
    "StartOutcome",
    "RecomputeResult",
    "admitted_teams",
    "compute_status_from_dates",
]
