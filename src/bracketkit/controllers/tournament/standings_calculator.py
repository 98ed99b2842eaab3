"""Standings and ranking for tournaments."""

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

from typing import Dict, List, Optional

from bracketkit.models.tournament import Standing, Tournament
from bracketkit.settings import EngineSettings
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


class StandingsCalculator:
    """Maintains points, wins, losses and ranks of a tournament's teams.

    Awards come from :class:`EngineSettings` (3 points per win, none per
    loss by default).
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or EngineSettings()

    def record_result(
        self, tournament: Tournament, winner_id: str, loser_id: str
    ) -> Tournament:
        """Credit a win to ``winner_id`` and a loss to ``loser_id``.

        Teams without a standing row (e.g. removed since the match was
        scheduled) are skipped.
        """
        return self._apply(tournament, winner_id, loser_id, 1)

    def revert_result(
        self, tournament: Tournament, winner_id: str, loser_id: str
    ) -> Tournament:
        """Undo a previously recorded result."""
        return self._apply(tournament, winner_id, loser_id, -1)

    def _apply(
        self, tournament: Tournament, winner_id: str, loser_id: str, sign: int
    ) -> Tournament:
        updated = tournament.copy()

        winner = updated.get_standing(winner_id)
        if winner is not None:
            winner.wins += sign
            winner.points += sign * self.settings.win_points
        else:
            logger.warning(f"No standing for winner {winner_id} in {tournament.name}")

        loser = updated.get_standing(loser_id)
        if loser is not None:
            loser.losses += sign
            loser.points += sign * self.settings.loss_points
        else:
            logger.warning(f"No standing for loser {loser_id} in {tournament.name}")

        return updated

    def recompute(self, tournament: Tournament) -> Tournament:
        """Order standings by points, then wins, and assign ranks from 1.

        The sort is stable: teams equal on both keep their prior order.
        """
        updated = tournament.copy()
        updated.standings = sorted(
            updated.standings, key=lambda s: (-s.points, -s.wins)
        )
        self._assign_ranks(updated.standings)
        return updated

    def rebuild_from_bracket(self, tournament: Tournament) -> Tournament:
        """Recount standings from the played matches of the bracket.

        Used once an elimination tournament is decided. Teams are ordered by
        wins (descending), then losses (ascending).
        """
        if tournament.bracket is None:
            return self.recompute(tournament)

        stats: Dict[str, Standing] = {
            r.team_id: Standing(team_id=r.team_id, rank=0)
            for r in tournament.registered_teams
        }

        for bracket_round in tournament.bracket.rounds:
            for bracket_match in bracket_round.matches:
                if not (bracket_match.winner and bracket_match.has_both_teams):
                    continue
                winner_id = bracket_match.winner
                loser_id = (
                    bracket_match.team2.team_id
                    if winner_id == bracket_match.team1.team_id
                    else bracket_match.team1.team_id
                )
                if winner_id in stats:
                    stats[winner_id].wins += 1
                if loser_id in stats:
                    stats[loser_id].losses += 1

        for standing in stats.values():
            standing.points = (
                standing.wins * self.settings.win_points
                + standing.losses * self.settings.loss_points
            )

        updated = tournament.copy()
        updated.standings = sorted(stats.values(), key=lambda s: (-s.wins, s.losses))
        self._assign_ranks(updated.standings)
        logger.info(f"Rebuilt standings of {tournament.name} from bracket results")
        return updated

    @staticmethod
    def _assign_ranks(standings: List[Standing]) -> None:
        for index, standing in enumerate(standings):
            standing.rank = index + 1
