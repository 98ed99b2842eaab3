import pytest

from bracketkit.controllers.tournament import StandingsCalculator
from bracketkit.settings import EngineSettings


@pytest.fixture
def calculator():
    return StandingsCalculator()


def test_record_result_awards_points(calculator, make_tournament):
    tournament = make_tournament(teams=2)

    updated = calculator.record_result(tournament, "team-b", "team-a")

    winner = updated.get_standing("team-b")
    loser = updated.get_standing("team-a")
    assert (winner.wins, winner.losses, winner.points) == (1, 0, 3)
    assert (loser.wins, loser.losses, loser.points) == (0, 1, 0)
    assert tournament.get_standing("team-b").points == 0


def test_custom_awards(make_tournament):
    calculator = StandingsCalculator(EngineSettings(win_points=2, loss_points=1))

    updated = calculator.record_result(make_tournament(teams=2), "team-a", "team-b")

    assert updated.get_standing("team-a").points == 2
    assert updated.get_standing("team-b").points == 1


def test_revert_undoes_record(calculator, make_tournament):
    tournament = make_tournament(teams=2)

    recorded = calculator.record_result(tournament, "team-a", "team-b")
    reverted = calculator.revert_result(recorded, "team-a", "team-b")

    assert [s.to_dict() for s in reverted.standings] == [
        s.to_dict() for s in tournament.standings
    ]


def test_missing_standing_is_skipped(calculator, make_tournament):
    updated = calculator.record_result(make_tournament(teams=1), "team-a", "team-gone")

    assert updated.get_standing("team-a").wins == 1
    assert updated.get_standing("team-gone") is None


def test_recompute_orders_by_points_then_wins(calculator, make_tournament):
    tournament = make_tournament(teams=4)
    rows = {s.team_id: s for s in tournament.standings}
    rows["team-a"].points, rows["team-a"].wins = 3, 1
    rows["team-b"].points, rows["team-b"].wins = 6, 2
    rows["team-c"].points, rows["team-c"].wins = 3, 3
    rows["team-d"].points, rows["team-d"].wins = 0, 0

    updated = calculator.recompute(tournament)

    assert [s.team_id for s in updated.standings] == ["team-b", "team-c", "team-a", "team-d"]
    assert [s.rank for s in updated.standings] == [1, 2, 3, 4]


def test_recompute_keeps_prior_order_on_full_tie(calculator, make_tournament):
    updated = calculator.recompute(make_tournament(teams=3))

    assert [s.team_id for s in updated.standings] == ["team-a", "team-b", "team-c"]
    assert [s.rank for s in updated.standings] == [1, 2, 3]


def test_rebuild_without_bracket_recomputes(calculator, make_tournament):
    tournament = calculator.record_result(make_tournament(teams=2), "team-b", "team-a")

    rebuilt = calculator.rebuild_from_bracket(tournament)

    assert [s.team_id for s in rebuilt.standings] == ["team-b", "team-a"]
