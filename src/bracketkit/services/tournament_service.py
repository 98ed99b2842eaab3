"""Tournament service - the operations offered to the outside world.

This is the primary interface for tournament management. It coordinates the
specialized managers, persists their results through a repository and emits
notification events. All mutations of one tournament are serialised by a
per-tournament lock, and every operation saves its changes in a single
repository commit.
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

import threading
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

from bracketkit.constants import (
    DEFAULT_FORMAT,
    EVENT_BRACKET_GENERATED,
    EVENT_TEAM_APPROVED,
    EVENT_TEAM_REJECTED,
    EVENT_TOURNAMENT_COMPLETED,
    EVENT_TOURNAMENT_STARTED,
    MATCH_CANCELLED,
    MATCH_ONGOING,
    MATCH_PENDING,
    STATUS_CANCELLED,
    TOURNAMENT_FORMATS,
)
from bracketkit.controllers.tournament import (
    BracketEngine,
    RecomputeResult,
    RegistrationManager,
    ScheduleGenerator,
    StandingsCalculator,
    TournamentLifecycle,
    admitted_teams,
)
from bracketkit.exceptions import (
    ConcurrentModificationException,
    InvalidScoreException,
    InvalidTournamentDataException,
    InvalidTransitionException,
    NotRegisteredException,
    TeamGameMismatchException,
    TeamNotFoundException,
)
from bracketkit.models.tournament import Bracket, Match, Standing, Tournament
from bracketkit.services.notifications import LoggingNotifier, Notifier, TournamentEvent
from bracketkit.services.repository import InMemoryRepository, TournamentRepository
from bracketkit.services.roster import TeamRoster
from bracketkit.settings import EngineSettings
from bracketkit.type_hints import TeamNames
from bracketkit.utils import setup_logger
from bracketkit.utils.dates import parse_datetime, utcnow

logger = setup_logger(__name__)


class TournamentService:
    """Facade over the tournament managers.

    This class coordinates all tournament operations through specialized managers:
    - RegistrationManager: admits and removes teams
    - ScheduleGenerator: creates the match list
    - BracketEngine: builds the bracket and advances winners
    - StandingsCalculator: keeps points and ranks
    - TournamentLifecycle: gates status transitions
    """

    def __init__(
        self,
        repository: Optional[TournamentRepository] = None,
        notifier: Optional[Notifier] = None,
        roster: Optional[TeamRoster] = None,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the service.

        Args:
            repository: Storage for tournaments and matches (in memory by default)
            notifier: Receiver of tournament events (logs them by default)
            roster: Optional team lookup; without it any team id is accepted
            settings: Engine settings
            clock: Source of the current time
        """
        self.repository = repository or InMemoryRepository()
        self.notifier = notifier or LoggingNotifier()
        self.roster = roster
        self.settings = settings or EngineSettings()
        self.clock = clock

        # Specialized managers
        self.standings = StandingsCalculator(self.settings)
        self.registration = RegistrationManager()
        self.schedule_generator = ScheduleGenerator(self.settings)
        self.bracket_engine = BracketEngine(
            self.settings, self.standings, self.registration
        )
        self.lifecycle = TournamentLifecycle(
            self.schedule_generator, self.bracket_engine, self.standings
        )

        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    # ========== Plumbing ==========

    @contextmanager
    def _locked(self, tournament_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(tournament_id, threading.RLock())
        with lock:
            yield

    def _load(self, tournament_id: str) -> Tournament:
        return self.lifecycle.refresh(
            self.repository.load_tournament(tournament_id), self.clock()
        )

    def _commit(self, tournament: Tournament, matches: Iterable[Match] = ()) -> Tournament:
        refreshed = self.lifecycle.refresh(tournament, self.clock())
        return self.repository.commit(refreshed, matches)

    def _notify(
        self, kind: str, tournament: Tournament, team_id: Optional[str] = None, **payload
    ) -> None:
        payload.setdefault("tournament_name", tournament.name)
        self.notifier.send(
            TournamentEvent(
                kind=kind,
                tournament_id=tournament.id,
                team_id=team_id,
                payload=payload,
                created_at=self.clock(),
            )
        )

    def _team_names(self, tournament: Tournament) -> Optional[TeamNames]:
        if self.roster is None:
            return None
        return self.roster.names_for(admitted_teams(tournament))

    # ========== Tournaments ==========

    def create_tournament(
        self,
        name: str,
        start_date: Union[str, datetime],
        end_date: Union[str, datetime],
        max_teams: int,
        format: str = DEFAULT_FORMAT,
        game: Optional[str] = None,
        description: str = "",
        rules: str = "Standard tournament rules apply",
        prize_pool: str = "",
    ) -> Tournament:
        """Create a tournament in the upcoming state.

        Raises:
            InvalidTournamentDataException: If a parameter is invalid
        """
        if not name or not name.strip():
            raise InvalidTournamentDataException("Tournament name is required")
        if format not in TOURNAMENT_FORMATS:
            raise InvalidTournamentDataException(
                f"Invalid format {format!r}, expected one of {', '.join(TOURNAMENT_FORMATS)}"
            )
        if isinstance(max_teams, bool) or not isinstance(max_teams, int) or max_teams < 2:
            raise InvalidTournamentDataException(
                f"max_teams must be an integer of at least 2, got {max_teams!r}"
            )
        try:
            start = parse_datetime(start_date)
            end = parse_datetime(end_date)
        except ValueError as e:
            raise InvalidTournamentDataException(f"Invalid date: {e}") from e
        if end <= start:
            raise InvalidTournamentDataException("End date must be after start date")

        tournament = Tournament(
            name=name.strip(),
            start_date=start,
            end_date=end,
            max_teams=max_teams,
            format=format,
            game=game,
            description=description,
            rules=rules,
            prize_pool=prize_pool,
            created_at=self.clock(),
        )
        saved = self._commit(tournament)
        logger.info(f"Created tournament {saved.name} ({saved.id}, {saved.format})")
        return saved

    def get_tournament(self, tournament_id: str) -> Tournament:
        return self._load(tournament_id)

    def list_tournaments(self) -> List[Tournament]:
        return self.repository.list_tournaments()

    def delete_tournament(self, tournament_id: str) -> None:
        """Delete a tournament together with all of its matches."""
        with self._locked(tournament_id):
            self.repository.delete_tournament(tournament_id)
        with self._locks_guard:
            self._locks.pop(tournament_id, None)

    # ========== Registration ==========

    def register_team(self, tournament_id: str, team_id: str) -> Tournament:
        """Register a team into an upcoming tournament.

        Raises:
            TeamNotFoundException: If a roster is configured and lacks the team
            TeamGameMismatchException: If the team plays another game
        """
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            if self.roster is not None:
                team = self.roster.get_team(team_id)
                if team is None:
                    raise TeamNotFoundException(f"Team {team_id} not found")
                if tournament.game and team.game and team.game != tournament.game:
                    raise TeamGameMismatchException(
                        f"Team {team.name} plays {team.game}, "
                        f"tournament {tournament.name} is {tournament.game}"
                    )
            tournament = self.registration.register(tournament, team_id, self.clock())
            return self._commit(tournament)

    def unregister_team(self, tournament_id: str, team_id: str) -> Tournament:
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            return self._commit(self.registration.unregister(tournament, team_id))

    def approve_team(self, tournament_id: str, team_id: str) -> Tournament:
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            saved = self._commit(self.registration.approve(tournament, team_id))
        self._notify(EVENT_TEAM_APPROVED, saved, team_id)
        return saved

    def reject_team(self, tournament_id: str, team_id: str) -> Tournament:
        """Remove a registration as an admin decision.

        Raises:
            NotRegisteredException: If the team is not registered
        """
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            if not tournament.is_registered(team_id):
                raise NotRegisteredException(
                    f"Team {team_id} is not registered in {tournament.name}"
                )
            saved = self._commit(self.registration.reject(tournament, team_id))
        self._notify(EVENT_TEAM_REJECTED, saved, team_id)
        return saved

    def withdraw_team(self, tournament_id: str, team_id: str) -> Tournament:
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            return self._commit(self.registration.withdraw(tournament, team_id))

    # ========== Schedule and bracket ==========

    def generate_schedule(self, tournament_id: str) -> List[Match]:
        """Create the tournament's matches.

        Returns:
            The created matches
        """
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            tournament, matches = self.schedule_generator.generate(tournament)
            self._commit(tournament, matches)
        return matches

    def generate_bracket(self, tournament_id: str) -> Bracket:
        """Build the elimination bracket from the admitted teams."""
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            tournament, created = self.bracket_engine.generate(
                tournament,
                self.repository.list_matches(tournament_id),
                self._team_names(tournament),
            )
            saved = self._commit(tournament, created)
        self._notify(
            EVENT_BRACKET_GENERATED, saved, total_rounds=saved.bracket.total_rounds
        )
        return saved.bracket

    def get_bracket(self, tournament_id: str) -> Optional[Bracket]:
        return self._load(tournament_id).bracket

    # ========== Matches ==========

    def get_matches(self, tournament_id: str) -> List[Match]:
        """Matches ordered by round, then match number."""
        self.repository.load_tournament(tournament_id)
        return self.repository.list_matches(tournament_id)

    def get_match(self, match_id: str) -> Match:
        return self.repository.load_match(match_id)

    def record_match_score(
        self, match_id: str, team1_score: int, team2_score: int
    ) -> Match:
        """Record a final score, advance the winner and update standings.

        Submitting the score already recorded for a match is a no-op.
        Submitting a different score corrects the earlier result.

        Args:
            match_id: ID of the match
            team1_score: Final score of team 1
            team2_score: Final score of team 2

        Returns:
            The completed match

        Raises:
            MatchNotFoundException: If the match does not exist
            InvalidScoreException: If the scores are equal
            InvalidTransitionException: If the match or tournament is cancelled
            ResultLockedException: If a changed winner has already played on
        """
        tournament_id = self.repository.load_match(match_id).tournament_id

        with self._locked(tournament_id):
            match = self.repository.load_match(match_id)
            tournament = self._load(tournament_id)

            if tournament.status == STATUS_CANCELLED:
                raise InvalidTransitionException(
                    f"Tournament {tournament.name} is cancelled"
                )
            if match.status == MATCH_CANCELLED:
                raise InvalidTransitionException(f"Match {match_id} is cancelled")
            if team1_score == team2_score:
                raise InvalidScoreException(
                    "Scores cannot be equal. There must be a winner."
                )
            if match.has_result(team1_score, team2_score):
                logger.warning(
                    f"Score {team1_score}-{team2_score} already recorded "
                    f"for match {match_id}, ignoring"
                )
                return match

            previous_champion = tournament.winner
            previous_winner = match.winner if match.is_completed else None
            previous_loser = match.loser if match.is_completed else None

            completed = Match.from_dict(match.to_dict())
            completed.complete(team1_score, team2_score)

            if previous_winner is not None and previous_winner != completed.winner:
                tournament = self.standings.revert_result(
                    tournament, previous_winner, previous_loser
                )
            if previous_winner != completed.winner:
                tournament = self.standings.record_result(
                    tournament, completed.winner, completed.loser
                )
            tournament = self.standings.recompute(tournament)

            to_save = [completed]
            crowned = False
            if tournament.bracket and tournament.bracket.find_match(match_id):
                outcome = self.bracket_engine.advance(
                    tournament,
                    self.repository.list_matches(tournament_id),
                    match_id,
                    completed.winner,
                    team1_score,
                    team2_score,
                    self.clock(),
                )
                tournament = outcome.tournament
                to_save.extend(outcome.created_matches)
                to_save.extend(outcome.changed_matches)
                # A corrected final score with the same winner crowns nobody new.
                crowned = outcome.is_final and tournament.winner != previous_champion

            saved = self._commit(tournament, to_save)
            logger.info(
                f"Recorded {team1_score}-{team2_score} for match "
                f"#{completed.match_number} of {saved.name}, winner {completed.winner}"
            )

        if crowned:
            self._notify(EVENT_TOURNAMENT_COMPLETED, saved, winner=saved.winner)
        return completed

    def update_match_score(self, match_id: str, team_id: str, score: int) -> Match:
        """Update one team's live score; the match moves to ongoing.

        Raises:
            InvalidTransitionException: If the match is completed or cancelled
        """
        tournament_id = self.repository.load_match(match_id).tournament_id

        with self._locked(tournament_id):
            match = self.repository.load_match(match_id)
            if match.status not in (MATCH_PENDING, MATCH_ONGOING):
                raise InvalidTransitionException(
                    f"Cannot update score of {match.status} match {match_id}"
                )
            match.update_score(team_id, score)
            match.status = MATCH_ONGOING

            tournament = self.bracket_engine.sync_match(self._load(tournament_id), match)
            self._commit(tournament, [match])
        return match

    # ========== Standings ==========

    def get_standings(self, tournament_id: str) -> List[Standing]:
        return self._load(tournament_id).standings

    # ========== Lifecycle ==========

    def start_tournament(self, tournament_id: str) -> Tournament:
        """Start an upcoming tournament, generating what it still lacks."""
        with self._locked(tournament_id):
            tournament = self._load(tournament_id)
            outcome = self.lifecycle.start(
                tournament,
                self.repository.list_matches(tournament_id),
                self._team_names(tournament),
            )
            saved = self._commit(outcome.tournament, outcome.created_matches)

        if outcome.bracket_generated:
            self._notify(
                EVENT_BRACKET_GENERATED, saved, total_rounds=saved.bracket.total_rounds
            )
        self._notify(
            EVENT_TOURNAMENT_STARTED, saved, team_count=len(admitted_teams(saved))
        )
        return saved

    def end_tournament(self, tournament_id: str) -> Tournament:
        with self._locked(tournament_id):
            saved = self._commit(self.lifecycle.end(self._load(tournament_id)))
        self._notify(EVENT_TOURNAMENT_COMPLETED, saved, winner=saved.winner)
        return saved

    def cancel_tournament(self, tournament_id: str) -> Tournament:
        with self._locked(tournament_id):
            return self._commit(self.lifecycle.cancel(self._load(tournament_id)))

    def reset_manual_override(self, tournament_id: str) -> Tournament:
        with self._locked(tournament_id):
            tournament = self.repository.load_tournament(tournament_id)
            return self._commit(self.lifecycle.reset_override(tournament, self.clock()))

    def recompute_all_statuses(self) -> RecomputeResult:
        """Refresh the date-driven status of every non-cancelled tournament."""
        result = self.lifecycle.recompute_all(
            self.repository.list_tournaments(), self.clock()
        )
        for refreshed in result.changed:
            with self._locked(refreshed.id):
                try:
                    self.repository.commit(refreshed)
                except ConcurrentModificationException:
                    # Changed since listing; refresh the current copy instead.
                    logger.warning(
                        f"Tournament {refreshed.id} changed during status refresh, reloading"
                    )
                    self._commit(self.repository.load_tournament(refreshed.id))
        return result
