"""Elimination bracket construction and winner advancement.

The bracket is a list of rounds. Round ``r`` of a bracket with capacity
``2 ** total_rounds`` has ``capacity >> r`` match positions, except round 1
which only holds the matches actually played (teams with a bye skip it).
The winner of the match at ``position`` in round ``r`` moves to position
``position // 2`` of round ``r + 1``: to ``team1`` when ``position`` is even,
to ``team2`` when it is odd.
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
from typing import Dict, List, Optional, Sequence, Tuple

from bracketkit.constants import (
    MATCH_COMPLETED,
    MATCH_ONGOING,
    MATCH_PENDING,
    ROUND_NAME_FINAL,
    ROUND_NAME_QUARTER_FINALS,
    ROUND_NAME_SEMI_FINALS,
    STATUS_COMPLETED,
)
from bracketkit.controllers.tournament.registration_manager import (
    RegistrationManager,
    admitted_teams,
)
from bracketkit.controllers.tournament.standings_calculator import StandingsCalculator
from bracketkit.exceptions import (
    BracketExistsException,
    InsufficientTeamsException,
    InvalidScoreException,
    MatchNotFoundException,
    ResultLockedException,
)
from bracketkit.models.tournament import (
    Bracket,
    BracketMatch,
    BracketRound,
    BracketSlot,
    ManualStatus,
    Match,
    MatchSide,
    Tournament,
)
from bracketkit.settings import EngineSettings
from bracketkit.type_hints import Side, TeamNames
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


def bracket_size(team_count: int) -> Tuple[int, int, int]:
    """Return ``(total_rounds, capacity, bye_count)`` for ``team_count`` teams.

    ``total_rounds`` is ``ceil(log2(team_count))``.
    """
    total_rounds = (team_count - 1).bit_length()
    capacity = 1 << total_rounds
    return total_rounds, capacity, capacity - team_count


def round_name(round_number: int, total_rounds: int, matches_in_round: int) -> str:
    """Display name of a round, derived from its distance to the final."""
    rounds_to_final = total_rounds - round_number
    if rounds_to_final == 0:
        return ROUND_NAME_FINAL
    if rounds_to_final == 1:
        return ROUND_NAME_SEMI_FINALS
    if rounds_to_final == 2:
        return ROUND_NAME_QUARTER_FINALS
    return f"Round of {2 * matches_in_round}"


def next_slot(position: int) -> Tuple[int, Side]:
    """Position and side in the next round reached by the winner at ``position``."""
    return position // 2, "team1" if position % 2 == 0 else "team2"


@dataclass
class AdvanceOutcome:
    """Result of recording a bracket match.

    Attributes
    ----------
    tournament : Tournament
        Updated tournament.
    created_matches : list of Match
        Next-round matches materialised because both teams became known.
    changed_matches : list of Match
        Existing pending matches whose teams were rewritten by a correction.
    changed : bool
        False when the same result had already been recorded.
    is_final : bool
        True when the recorded match was the final.
    """

    tournament: Tournament
    created_matches: List[Match] = field(default_factory=list)
    changed_matches: List[Match] = field(default_factory=list)
    changed: bool = True
    is_final: bool = False


class BracketEngine:
    """Builds elimination brackets and moves winners through them."""

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        standings: Optional[StandingsCalculator] = None,
        registration: Optional[RegistrationManager] = None,
    ):
        self.settings = settings or EngineSettings()
        self.standings = standings or StandingsCalculator(self.settings)
        self.registration = registration or RegistrationManager()

    # ========== Generation ==========

    def generate(
        self,
        tournament: Tournament,
        matches: Sequence[Match] = (),
        names: Optional[TeamNames] = None,
    ) -> Tuple[Tournament, List[Match]]:
        """Build the bracket of a tournament.

        The first ``bye_count`` admitted teams receive a bye into round 2;
        the others are paired in order for round 1. Round 1 bracket matches
        link to the tournament's existing round 1 matches by team pair, and
        any missing match is created.

        Args:
            tournament: Tournament without a bracket
            matches: The tournament's existing matches
            names: Optional team display names (id -> name)

        Returns:
            Tuple of (updated tournament, created matches)

        Raises:
            BracketExistsException: If the tournament already has a bracket
            InsufficientTeamsException: If fewer than two teams are admitted
        """
        if tournament.bracket is not None:
            raise BracketExistsException(
                f"Bracket already exists for {tournament.name}"
            )

        teams = admitted_teams(tournament)
        if len(teams) < 2:
            raise InsufficientTeamsException(
                f"Need at least 2 admitted teams to build a bracket, got {len(teams)}"
            )

        names = names or {}
        total_rounds, capacity, bye_count = bracket_size(len(teams))
        bye_teams = teams[:bye_count]
        playing = teams[bye_count:]
        first_round_count = len(playing) // 2

        logger.info(
            f"Generating bracket for {tournament.name}: {len(teams)} teams, "
            f"{total_rounds} rounds, capacity {capacity}, {bye_count} byes"
        )

        rounds = []
        for round_number in range(1, total_rounds + 1):
            tree_width = capacity >> round_number
            count = first_round_count if round_number == 1 else tree_width
            # Names follow the full tree, so a byes-heavy round 1 keeps the
            # name of its bracket size ("Round of 16" for 9 teams, one match).
            rounds.append(
                BracketRound(
                    round=round_number,
                    name=round_name(round_number, total_rounds, tree_width),
                    matches=[BracketMatch(position=p) for p in range(count)],
                )
            )

        updated = tournament.copy()
        updated.bracket = Bracket(
            format=tournament.format, total_rounds=total_rounds, rounds=rounds
        )
        created: List[Match] = []
        round_one_matches = [m for m in matches if m.round == 1]

        for position in range(first_round_count):
            team1, team2 = playing[2 * position], playing[2 * position + 1]
            bracket_match = rounds[0].matches[position]
            bracket_match.team1 = self._slot(team1, names)
            bracket_match.team2 = self._slot(team2, names)

            linked = next(
                (m for m in round_one_matches if m.is_same_pair(team1, team2)), None
            )
            if linked is None:
                linked = self._new_match(
                    updated,
                    created,
                    1,
                    team1,
                    team2,
                    tournament.start_date + self.settings.match_slot * position,
                )
            self._link(bracket_match, linked)

        rounds[0].byes = [self._slot(team_id, names) for team_id in bye_teams]
        if len(rounds) > 1:
            for offset, team_id in enumerate(bye_teams):
                position, side = next_slot(first_round_count + offset)
                rounds[1].matches[position].set_slot(side, self._slot(team_id, names))

            for bracket_match in rounds[1].matches:
                if bracket_match.has_both_teams:
                    self._materialise(
                        updated,
                        created,
                        2,
                        bracket_match,
                        tournament.start_date + self.settings.advance_delay,
                    )

        # Results recorded before the bracket existed still move their winners on.
        for bracket_match in rounds[0].matches:
            if bracket_match.is_completed and bracket_match.winner:
                self._propagate(
                    updated, matches, 1, bracket_match, tournament.start_date, created, []
                )

        return updated, created

    # ========== Advancement ==========

    def advance(
        self,
        tournament: Tournament,
        matches: Sequence[Match],
        match_id: str,
        winner_id: str,
        team1_score: int,
        team2_score: int,
        now: datetime,
    ) -> AdvanceOutcome:
        """Record a bracket match result and move the winner on.

        Re-applying a result that is already recorded changes nothing. A
        result that changes the winner is accepted only while the next-round
        match has not started; the next-round slot, and its pending match if
        one exists, are rewritten to the new winner.

        Args:
            tournament: Tournament with a bracket
            matches: The tournament's existing matches
            match_id: ID of the persisted match being recorded
            winner_id: ID of the winning team
            team1_score: Final score of team 1
            team2_score: Final score of team 2
            now: Time of recording, used to schedule created matches

        Returns:
            AdvanceOutcome with the updated tournament and affected matches

        Raises:
            MatchNotFoundException: If the match is not part of the bracket
            InvalidScoreException: If the scores are equal or disagree with the winner
            ResultLockedException: If a changed winner has already played on
        """
        if tournament.bracket is None or tournament.bracket.find_match(match_id) is None:
            raise MatchNotFoundException(
                f"Match {match_id} is not part of the bracket of {tournament.name}"
            )
        if team1_score == team2_score:
            raise InvalidScoreException(
                "Scores cannot be equal. There must be a winner."
            )

        _, current = tournament.bracket.find_match(match_id)
        if winner_id not in (current.team1.team_id, current.team2.team_id):
            raise InvalidScoreException(
                f"Team {winner_id} does not play in match {match_id}"
            )
        if (team1_score > team2_score) != (winner_id == current.team1.team_id):
            raise InvalidScoreException(
                f"Winner {winner_id} must have the higher score "
                f"({team1_score}-{team2_score})"
            )

        if (
            current.is_completed
            and current.winner == winner_id
            and current.team1.score == team1_score
            and current.team2.score == team2_score
        ):
            logger.warning(f"Result for match {match_id} already recorded, ignoring")
            return AdvanceOutcome(tournament=tournament, changed=False)

        updated = tournament.copy()
        bracket_round, bracket_match = updated.bracket.find_match(match_id)
        previous_winner = bracket_match.winner if bracket_match.is_completed else None

        if previous_winner is not None and previous_winner != winner_id:
            self._check_downstream_open(updated, bracket_round.round, bracket_match)
            logger.info(
                f"Correcting winner of match {match_id}: {previous_winner} -> {winner_id}"
            )

        bracket_match.team1.score = team1_score
        bracket_match.team2.score = team2_score
        bracket_match.winner = winner_id
        bracket_match.status = MATCH_COMPLETED

        loser_id = (
            bracket_match.team2.team_id
            if winner_id == bracket_match.team1.team_id
            else bracket_match.team1.team_id
        )
        outcome = AdvanceOutcome(tournament=updated)
        self._propagate(
            updated,
            matches,
            bracket_round.round,
            bracket_match,
            now,
            outcome.created_matches,
            outcome.changed_matches,
        )
        updated = self._update_admission(updated, winner_id, loser_id)
        outcome.tournament = updated

        if bracket_round.round == updated.bracket.total_rounds:
            outcome.is_final = True
            updated.winner = winner_id
            updated.status_control = ManualStatus(STATUS_COMPLETED)
            outcome.tournament = self.standings.rebuild_from_bracket(updated)
            logger.info(f"Tournament {tournament.name} won by {winner_id}")

        return outcome

    def sync_match(self, tournament: Tournament, match: Match) -> Tournament:
        """Mirror a match's live status and scores into its bracket node.

        Winners are only moved on by :meth:`advance`.
        """
        if tournament.bracket is None or tournament.bracket.find_match(match.id) is None:
            return tournament

        updated = tournament.copy()
        _, bracket_match = updated.bracket.find_match(match.id)
        if bracket_match.is_completed:
            return tournament
        bracket_match.status = match.status
        for side in (match.team1, match.team2):
            if side.team_id == bracket_match.team1.team_id:
                bracket_match.team1.score = side.score
            elif side.team_id == bracket_match.team2.team_id:
                bracket_match.team2.score = side.score
        return updated

    def _check_downstream_open(
        self, tournament: Tournament, round_number: int, bracket_match: BracketMatch
    ) -> None:
        next_round = tournament.bracket.get_round(round_number + 1)
        if next_round is None:
            return
        position, _ = next_slot(bracket_match.position)
        target = next_round.matches[position]
        if target.status in (MATCH_ONGOING, MATCH_COMPLETED):
            raise ResultLockedException(
                f"Cannot change the winner of match {bracket_match.match_id}: "
                f"round {round_number + 1} match {position} has already "
                f"{'finished' if target.is_completed else 'started'}"
            )

    def _propagate(
        self,
        tournament: Tournament,
        matches: Sequence[Match],
        round_number: int,
        bracket_match: BracketMatch,
        now: datetime,
        created: List[Match],
        changed: List[Match],
    ) -> None:
        """Write the winner of ``bracket_match`` into its next-round slot."""
        next_round = tournament.bracket.get_round(round_number + 1)
        if next_round is None:
            return

        position, side = next_slot(bracket_match.position)
        target = next_round.matches[position]
        winner_slot = (
            bracket_match.team1
            if bracket_match.winner == bracket_match.team1.team_id
            else bracket_match.team2
        )
        current = target.slot(side)
        if current.team_id == winner_slot.team_id:
            return

        target.set_slot(side, BracketSlot(winner_slot.team_id, winner_slot.name))
        logger.debug(
            f"Advanced {winner_slot.team_id} to round {round_number + 1}, "
            f"position {position}, {side}"
        )

        if target.match_id is not None:
            persisted = next((m for m in matches if m.id == target.match_id), None)
            if persisted is not None:
                rewritten = copy.deepcopy(persisted)
                setattr(rewritten, side, MatchSide(winner_slot.team_id))
                changed.append(rewritten)
        elif target.has_both_teams:
            self._materialise(
                tournament,
                created,
                round_number + 1,
                target,
                now + self.settings.advance_delay,
            )

    # ========== Helpers ==========

    def _update_admission(
        self, tournament: Tournament, winner_id: str, loser_id: str
    ) -> Tournament:
        # Teams removed since the match was played keep no registration to update.
        if tournament.is_registered(loser_id):
            tournament = self.registration.eliminate(tournament, loser_id)
        return self.registration.reinstate(tournament, winner_id)

    def _materialise(
        self,
        tournament: Tournament,
        created: List[Match],
        round_number: int,
        bracket_match: BracketMatch,
        scheduled_date: datetime,
    ) -> None:
        match = self._new_match(
            tournament,
            created,
            round_number,
            bracket_match.team1.team_id,
            bracket_match.team2.team_id,
            scheduled_date,
        )
        self._link(bracket_match, match)
        logger.info(
            f"Created round {round_number} match #{match.match_number}: "
            f"{bracket_match.team1.name} vs {bracket_match.team2.name}"
        )

    @staticmethod
    def _new_match(
        tournament: Tournament,
        created: List[Match],
        round_number: int,
        team1: str,
        team2: str,
        scheduled_date: datetime,
    ) -> Match:
        match = Match(
            tournament_id=tournament.id,
            round=round_number,
            match_number=len(tournament.match_ids) + 1,
            team1=MatchSide(team1),
            team2=MatchSide(team2),
            scheduled_date=scheduled_date,
            status=MATCH_PENDING,
        )
        tournament.match_ids.append(match.id)
        created.append(match)
        return match

    @staticmethod
    def _link(bracket_match: BracketMatch, match: Match) -> None:
        bracket_match.match_id = match.id
        bracket_match.status = match.status
        bracket_match.scheduled_date = match.scheduled_date
        if match.is_completed:
            bracket_match.winner = match.winner
            for side in (match.team1, match.team2):
                if side.team_id == bracket_match.team1.team_id:
                    bracket_match.team1.score = side.score
                else:
                    bracket_match.team2.score = side.score

    @staticmethod
    def _slot(team_id: str, names: Dict[str, str]) -> BracketSlot:
        return BracketSlot(team_id=team_id, name=names.get(team_id, team_id))
