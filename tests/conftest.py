from datetime import datetime

import pytest

from bracketkit.controllers.tournament import RegistrationManager
from bracketkit.models import Team
from bracketkit.models.tournament import Tournament
from bracketkit.services import (
    InMemoryRepository,
    InMemoryRoster,
    MemoryNotifier,
    TournamentService,
)
from bracketkit.utils.dates import UTC

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
START = datetime(2025, 2, 1, 10, 0, tzinfo=UTC)
END = datetime(2025, 2, 3, 18, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now


def team_ids(count):
    return [f"team-{chr(ord('a') + i)}" for i in range(count)]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def start():
    return START


@pytest.fixture
def end():
    return END


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_tournament():
    """Build an upcoming tournament with ``teams`` teams registered in order."""
    registration = RegistrationManager()

    def _make(teams=0, format="single-elimination", max_teams=8, **kwargs):
        tournament = Tournament(
            name="Spring Cup",
            start_date=START,
            end_date=END,
            max_teams=max_teams,
            format=format,
            **kwargs,
        )
        for team_id in team_ids(teams):
            tournament = registration.register(tournament, team_id, NOW)
        return tournament

    return _make


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def notifier():
    return MemoryNotifier()


@pytest.fixture
def service(repository, notifier, clock):
    return TournamentService(repository, notifier=notifier, clock=clock)


@pytest.fixture
def roster():
    teams = [Team(id=team_id, name=team_id.upper(), game="chess") for team_id in team_ids(4)]
    teams.append(Team(id="team-go", name="Go Club", game="go"))
    return InMemoryRoster(teams)


@pytest.fixture
def create(service):
    """Create a tournament through the service with sensible defaults."""

    def _create(teams=0, format="single-elimination", max_teams=8, approve=False, **kwargs):
        tournament = service.create_tournament(
            name="Spring Cup",
            start_date=START,
            end_date=END,
            max_teams=max_teams,
            format=format,
            **kwargs,
        )
        for team_id in team_ids(teams):
            tournament = service.register_team(tournament.id, team_id)
            if approve:
                tournament = service.approve_team(tournament.id, team_id)
        return tournament

    return _create
