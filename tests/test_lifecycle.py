from datetime import datetime

import pytest

from bracketkit.controllers.tournament import (
    TournamentLifecycle,
    compute_status_from_dates,
)
from bracketkit.exceptions import InsufficientTeamsException, InvalidTransitionException
from bracketkit.models.tournament import AutoStatus, ManualStatus
from bracketkit.utils.dates import UTC

START = datetime(2025, 2, 1, 10, 0, tzinfo=UTC)
END = datetime(2025, 2, 3, 18, 0, tzinfo=UTC)
BEFORE = datetime(2025, 1, 31, tzinfo=UTC)
DURING = datetime(2025, 2, 2, tzinfo=UTC)
AFTER = datetime(2025, 2, 4, tzinfo=UTC)


@pytest.fixture
def lifecycle():
    return TournamentLifecycle()


@pytest.mark.parametrize(
    "now, expected",
    [
        (BEFORE, "upcoming"),
        (START, "ongoing"),
        (DURING, "ongoing"),
        (END, "ongoing"),
        (AFTER, "completed"),
    ],
)
def test_status_from_dates(now, expected):
    assert compute_status_from_dates(now, START, END) == expected


def test_refresh_follows_dates_in_auto_mode(lifecycle, make_tournament):
    tournament = make_tournament()

    refreshed = lifecycle.refresh(tournament, DURING)

    assert refreshed.status_control == AutoStatus("ongoing")
    assert tournament.status == "upcoming"


@pytest.mark.parametrize("control", [ManualStatus("ongoing"), AutoStatus("cancelled")])
def test_refresh_leaves_manual_and_cancelled_alone(lifecycle, make_tournament, control):
    tournament = make_tournament()
    tournament.status_control = control

    assert lifecycle.refresh(tournament, AFTER).status_control == control


def test_cancelled_is_never_overwritten(lifecycle, make_tournament):
    tournament = lifecycle.cancel(make_tournament())

    assert lifecycle.refresh(tournament, DURING).status == "cancelled"
    assert lifecycle.reset_override(tournament, DURING).status == "cancelled"


def test_start_generates_schedule_and_bracket(lifecycle, make_tournament):
    outcome = lifecycle.start(make_tournament(teams=4), [])

    assert outcome.schedule_generated and outcome.bracket_generated
    assert len(outcome.created_matches) == 2
    assert outcome.tournament.status_control == ManualStatus("ongoing")
    assert outcome.tournament.bracket.total_rounds == 2


def test_start_round_robin_has_no_bracket(lifecycle, make_tournament):
    outcome = lifecycle.start(make_tournament(teams=3, format="round-robin"), [])

    assert outcome.schedule_generated
    assert not outcome.bracket_generated
    assert outcome.tournament.bracket is None
    assert len(outcome.created_matches) == 3


def test_start_requires_upcoming(lifecycle, make_tournament):
    tournament = make_tournament(teams=2)
    tournament.status_control = ManualStatus("ongoing")

    with pytest.raises(InvalidTransitionException):
        lifecycle.start(tournament, [])


def test_start_requires_two_admitted_teams(lifecycle, make_tournament):
    tournament = make_tournament(teams=2)
    tournament.get_registration("team-b").admission_status = "withdrawn"

    with pytest.raises(InsufficientTeamsException):
        lifecycle.start(tournament, [])


def test_end_requires_ongoing(lifecycle, make_tournament):
    with pytest.raises(InvalidTransitionException):
        lifecycle.end(make_tournament(teams=2))


def test_end_completes_manually(lifecycle, make_tournament):
    started = lifecycle.start(make_tournament(teams=2), []).tournament

    ended = lifecycle.end(started)

    assert ended.status_control == ManualStatus("completed")
    assert [s.rank for s in ended.standings] == [1, 2]


def test_completed_cannot_be_cancelled(lifecycle, make_tournament):
    started = lifecycle.start(make_tournament(teams=2), []).tournament
    ended = lifecycle.end(started)

    with pytest.raises(InvalidTransitionException):
        lifecycle.cancel(ended)


def test_reset_override_returns_to_dates(lifecycle, make_tournament):
    started = lifecycle.start(make_tournament(teams=2), []).tournament

    reset = lifecycle.reset_override(started, BEFORE)

    assert not reset.manual_override
    assert reset.status == "upcoming"


def test_recompute_all_counts_changes(lifecycle, make_tournament):
    auto = make_tournament()
    manual = make_tournament()
    manual.status_control = ManualStatus("upcoming")
    cancelled = make_tournament()
    cancelled.status_control = ManualStatus("cancelled")

    result = lifecycle.recompute_all([auto, manual, cancelled], DURING)

    assert result.total == 2
    assert result.updated == 1
    assert result.changed[0].id == auto.id
    assert result.changed[0].status == "ongoing"
