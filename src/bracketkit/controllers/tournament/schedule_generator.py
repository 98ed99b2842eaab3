"""Match schedule generation for tournaments.

This module turns the admitted teams of a tournament into an ordered list of
matches for round-robin and elimination formats.
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

from itertools import combinations
from typing import List, Optional, Tuple

from bracketkit.constants import FORMAT_ROUND_ROBIN
from bracketkit.controllers.tournament.registration_manager import admitted_teams
from bracketkit.exceptions import InsufficientTeamsException, ScheduleExistsException
from bracketkit.models.tournament import Match, MatchSide, Tournament
from bracketkit.settings import EngineSettings
from bracketkit.type_hints import TeamPair
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


class ScheduleGenerator:
    """Builds the match list of a tournament.

    Round-robin tournaments get every pairing at once. Elimination formats
    only get their first round here; later rounds are created by the bracket
    engine as winners become known.
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def generate(self, tournament: Tournament) -> Tuple[Tournament, List[Match]]:
        """Generate the schedule for a tournament.

        Args:
            tournament: Tournament without matches

        Returns:
            Tuple of (updated tournament, created matches)

        Raises:
            ScheduleExistsException: If the tournament already has matches
            InsufficientTeamsException: If fewer than two teams are admitted
        """
        if tournament.has_schedule:
            raise ScheduleExistsException(
                f"Schedule already exists for {tournament.name} "
                f"({len(tournament.match_ids)} matches)"
            )

        teams = admitted_teams(tournament)
        if len(teams) < 2:
            raise InsufficientTeamsException(
                f"Need at least 2 admitted teams to build a schedule, got {len(teams)}"
            )

        if tournament.format == FORMAT_ROUND_ROBIN:
            pairs = self._round_robin_pairs(teams)
        else:
            pairs = self._first_round_pairs(teams)

        matches = self._build_matches(tournament, pairs)

        updated = tournament.copy()
        updated.match_ids.extend(m.id for m in matches)
        logger.info(
            f"Generated {tournament.format} schedule for {tournament.name}: "
            f"{len(matches)} matches for {len(teams)} teams"
        )
        return updated, matches

    def _round_robin_pairs(self, teams: List[str]) -> List[TeamPair]:
        """Every unordered pair (i, j) with i < j, in registration order."""
        return list(combinations(teams, 2))

    def _first_round_pairs(self, teams: List[str]) -> List[TeamPair]:
        """Consecutive pairs (0, 1), (2, 3), ... for round 1."""
        pairs = [(teams[i], teams[i + 1]) for i in range(0, len(teams) - 1, 2)]
        if len(teams) % 2:
            # The bracket grants the real byes; this pass leaves the team out.
            logger.warning(
                f"Odd number of teams ({len(teams)}): team {teams[-1]} "
                "has no round 1 match in the schedule"
            )
        return pairs

    def _build_matches(
        self, tournament: Tournament, pairs: List[TeamPair]
    ) -> List[Match]:
        matches = []
        scheduled_date = tournament.start_date
        next_number = len(tournament.match_ids) + 1

        for offset, (team1, team2) in enumerate(pairs):
            matches.append(
                Match(
                    tournament_id=tournament.id,
                    round=1,
                    match_number=next_number + offset,
                    team1=MatchSide(team1),
                    team2=MatchSide(team2),
                    scheduled_date=scheduled_date,
                )
            )
            scheduled_date = scheduled_date + self.settings.match_slot
        return matches
