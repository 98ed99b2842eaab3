import threading
from datetime import datetime

import pytest

from bracketkit.exceptions import (
    InvalidScoreException,
    InvalidTournamentDataException,
    InvalidTransitionException,
    MatchNotFoundException,
    NotRegisteredException,
    ResultLockedException,
    TeamGameMismatchException,
    TeamNotFoundException,
    TournamentFullException,
    TournamentNotFoundException,
)
from bracketkit.services import TournamentService
from bracketkit.utils.dates import UTC


def _final(service, tournament_id):
    return [m for m in service.get_matches(tournament_id) if m.round == 2][0]


# ========== Creation ==========


def test_create_parses_dates_and_starts_upcoming(service):
    tournament = service.create_tournament(
        name="  Spring Cup ",
        start_date="2025-02-01T10:00:00",
        end_date="2025-02-03T18:00:00Z",
        max_teams=8,
        game="chess",
    )

    assert tournament.name == "Spring Cup"
    assert tournament.start_date == datetime(2025, 2, 1, 10, tzinfo=UTC)
    assert tournament.status == "upcoming"
    assert not tournament.manual_override
    assert tournament.version == 1
    assert service.get_tournament(tournament.id).game == "chess"


def test_create_inside_date_window_is_ongoing(service, clock, start, end):
    clock.now = start

    tournament = service.create_tournament("Live Cup", start, end, 4)

    assert tournament.status == "ongoing"


@pytest.mark.parametrize(
    "overrides",
    [
        {"name": " "},
        {"format": "swiss"},
        {"max_teams": 1},
        {"max_teams": True},
        {"start_date": "not a date"},
        {"end_date": "2025-02-01T10:00:00"},
    ],
)
def test_create_rejects_invalid_data(service, overrides):
    params = {
        "name": "Cup",
        "start_date": "2025-02-01T10:00:00",
        "end_date": "2025-02-03T18:00:00",
        "max_teams": 4,
    }
    params.update(overrides)

    with pytest.raises(InvalidTournamentDataException):
        service.create_tournament(**params)


# ========== Registration ==========


def test_end_to_end_round_robin_ranking(service, create):
    tournament = create(teams=4, max_teams=4, format="round-robin", approve=True)
    assert all(r.admission_status == "confirmed" for r in tournament.registered_teams)

    matches = service.generate_schedule(tournament.id)
    assert len(matches) == 6

    for match in matches:
        if "team-c" in match.team_ids:
            if match.team1.team_id == "team-c":
                service.record_match_score(match.id, 2, 0)
            else:
                service.record_match_score(match.id, 0, 2)

    tournament = service.get_tournament(tournament.id)
    leader = tournament.standings[0]
    assert leader.team_id == "team-c"
    assert (leader.rank, leader.wins, leader.points) == (1, 3, 9)
    assert [s.rank for s in tournament.standings] == [1, 2, 3, 4]


def test_full_tournament_rejects_registration_without_saving(service, create):
    tournament = create(teams=2, max_teams=2)

    with pytest.raises(TournamentFullException):
        service.register_team(tournament.id, "team-x")

    assert service.get_tournament(tournament.id).version == tournament.version


def test_roster_checks_team_and_game(repository, notifier, clock, roster):
    service = TournamentService(repository, notifier=notifier, roster=roster, clock=clock)
    tournament = service.create_tournament(
        "Chess Cup", "2025-02-01T10:00", "2025-02-02T10:00", 4, game="chess"
    )

    service.register_team(tournament.id, "team-a")
    with pytest.raises(TeamNotFoundException):
        service.register_team(tournament.id, "team-x")
    with pytest.raises(TeamGameMismatchException):
        service.register_team(tournament.id, "team-go")


def test_roster_names_appear_in_bracket(repository, notifier, clock, roster):
    service = TournamentService(repository, notifier=notifier, roster=roster, clock=clock)
    tournament = service.create_tournament("Cup", "2025-02-01T10:00", "2025-02-02T10:00", 4)
    for team_id in ("team-a", "team-b"):
        service.register_team(tournament.id, team_id)

    bracket = service.generate_bracket(tournament.id)

    final = bracket.get_round(1).matches[0]
    assert (final.team1.name, final.team2.name) == ("TEAM-A", "TEAM-B")


def test_approve_and_reject_emit_events(service, create, notifier):
    tournament = create(teams=2)

    service.approve_team(tournament.id, "team-a")
    service.reject_team(tournament.id, "team-b")

    events = notifier.drain()
    assert [(e.kind, e.team_id) for e in events] == [
        ("team_approved", "team-a"),
        ("team_rejected", "team-b"),
    ]
    assert events[0].payload["tournament_name"] == "Spring Cup"
    assert not service.get_tournament(tournament.id).is_registered("team-b")


def test_reject_absent_team_fails(service, create):
    tournament = create(teams=1)

    with pytest.raises(NotRegisteredException):
        service.reject_team(tournament.id, "team-x")
    # unregister is lenient
    service.unregister_team(tournament.id, "team-x")


def test_unknown_tournament(service):
    with pytest.raises(TournamentNotFoundException):
        service.register_team("tournament_missing", "team-a")


def test_concurrent_registrations_are_all_kept(service, create):
    tournament = create(max_teams=16)
    errors = []

    def register(team_id):
        try:
            service.register_team(tournament.id, team_id)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=register, args=(f"team-{i}",)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(service.get_tournament(tournament.id).registered_teams) == 16


# ========== Lifecycle ==========


def test_start_single_elimination_emits_events(service, create, notifier):
    tournament = create(teams=4)
    notifier.drain()

    started = service.start_tournament(tournament.id)

    assert started.status == "ongoing" and started.manual_override
    assert started.bracket is not None
    assert len(service.get_matches(tournament.id)) == 2
    assert notifier.kinds() == ["bracket_generated", "tournament_started"]


def test_start_round_robin_only_announces_start(service, create, notifier):
    tournament = create(teams=3, format="round-robin")
    notifier.drain()

    service.start_tournament(tournament.id)

    assert notifier.kinds() == ["tournament_started"]
    assert len(service.get_matches(tournament.id)) == 3


def test_manual_status_survives_date_refresh_until_reset(service, create, clock, end):
    tournament = create(teams=2)
    service.start_tournament(tournament.id)

    clock.now = end.replace(year=end.year + 1)
    result = service.recompute_all_statuses()
    assert result.updated == 0
    assert service.get_tournament(tournament.id).status == "ongoing"

    reset = service.reset_manual_override(tournament.id)
    assert reset.status == "completed"
    assert not reset.manual_override


def test_recompute_all_statuses(service, create, clock, start):
    first = create()
    second = create()
    service.cancel_tournament(second.id)

    clock.now = start
    result = service.recompute_all_statuses()

    assert (result.updated, result.total) == (1, 1)
    assert service.get_tournament(first.id).status == "ongoing"
    assert service.get_tournament(second.id).status == "cancelled"


def test_end_and_cancel_transitions(service, create, notifier):
    tournament = create(teams=2, format="round-robin")
    with pytest.raises(InvalidTransitionException):
        service.end_tournament(tournament.id)

    service.start_tournament(tournament.id)
    ended = service.end_tournament(tournament.id)
    assert ended.status == "completed"
    assert notifier.kinds()[-1] == "tournament_completed"

    with pytest.raises(InvalidTransitionException):
        service.cancel_tournament(tournament.id)


# ========== Scores ==========


def test_single_elimination_runs_to_a_champion(service, create, notifier):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1, semi2 = service.get_matches(tournament.id)

    service.record_match_score(semi1.id, 3, 1)
    service.record_match_score(semi2.id, 0, 2)
    final = _final(service, tournament.id)
    assert final.team_ids == ("team-a", "team-d")

    service.record_match_score(final.id, 1, 2)

    finished = service.get_tournament(tournament.id)
    assert finished.status == "completed"
    assert finished.winner == "team-d"
    assert finished.standings[0].team_id == "team-d"
    assert finished.get_registration("team-a").admission_status == "eliminated"
    assert notifier.kinds()[-1] == "tournament_completed"
    assert service.get_bracket(tournament.id).get_round(2).matches[0].winner == "team-d"


def test_final_score_correction_announces_champion_once(service, create, notifier):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1, semi2 = service.get_matches(tournament.id)
    service.record_match_score(semi1.id, 3, 1)
    service.record_match_score(semi2.id, 0, 2)
    final = _final(service, tournament.id)
    service.record_match_score(final.id, 1, 2)

    corrected = service.record_match_score(final.id, 0, 2)

    assert corrected.winner == "team-d"
    assert service.get_match(final.id).team2.score == 2
    assert notifier.kinds().count("tournament_completed") == 1
    assert service.get_tournament(tournament.id).winner == "team-d"


def test_final_winner_correction_announces_new_champion(service, create, notifier):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1, semi2 = service.get_matches(tournament.id)
    service.record_match_score(semi1.id, 3, 1)
    service.record_match_score(semi2.id, 0, 2)
    final = _final(service, tournament.id)
    service.record_match_score(final.id, 1, 2)

    service.record_match_score(final.id, 2, 1)

    assert notifier.kinds().count("tournament_completed") == 2
    assert service.get_tournament(tournament.id).winner == "team-a"


def test_five_team_bracket_through_service(service, create):
    tournament = create(teams=5)

    schedule = service.generate_schedule(tournament.id)
    assert len(schedule) == 2

    bracket = service.generate_bracket(tournament.id)
    assert bracket.total_rounds == 3
    assert len(bracket.get_round(1).matches) == 1
    matches = service.get_matches(tournament.id)
    assert [m.match_number for m in matches if m.round == 1] == [1, 2, 3]
    assert [m.team_ids for m in matches if m.round == 2] == [("team-b", "team-c")]


def test_resubmitting_same_score_is_noop(service, create):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1 = service.get_matches(tournament.id)[0]
    service.record_match_score(semi1.id, 3, 1)
    before = service.get_tournament(tournament.id)

    service.record_match_score(semi1.id, 3, 1)

    after = service.get_tournament(tournament.id)
    assert after.version == before.version
    assert len(service.get_matches(tournament.id)) == 2


def test_correcting_round_robin_result_moves_points(service, create):
    tournament = create(teams=2, format="round-robin")
    (match,) = service.generate_schedule(tournament.id)

    service.record_match_score(match.id, 2, 1)
    service.record_match_score(match.id, 0, 1)

    tournament = service.get_tournament(tournament.id)
    a, b = tournament.get_standing("team-a"), tournament.get_standing("team-b")
    assert (a.wins, a.losses, a.points) == (0, 1, 0)
    assert (b.wins, b.losses, b.points) == (1, 0, 3)
    assert tournament.standings[0].team_id == "team-b"


def test_correction_updates_pending_final(service, create):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1, semi2 = service.get_matches(tournament.id)
    service.record_match_score(semi1.id, 3, 1)
    service.record_match_score(semi2.id, 0, 2)

    service.record_match_score(semi1.id, 1, 3)

    assert _final(service, tournament.id).team_ids == ("team-b", "team-d")
    standing = service.get_tournament(tournament.id).get_standing("team-a")
    assert (standing.wins, standing.losses) == (0, 1)


def test_correction_after_final_started_is_locked(service, create):
    tournament = create(teams=4)
    service.start_tournament(tournament.id)
    semi1, semi2 = service.get_matches(tournament.id)
    service.record_match_score(semi1.id, 3, 1)
    service.record_match_score(semi2.id, 0, 2)
    final = _final(service, tournament.id)
    service.update_match_score(final.id, "team-a", 1)
    before = service.get_tournament(tournament.id)

    with pytest.raises(ResultLockedException):
        service.record_match_score(semi1.id, 1, 3)

    assert service.get_tournament(tournament.id).to_dict() == before.to_dict()
    assert service.get_match(semi1.id).winner == "team-a"


def test_live_score_updates(service, create):
    tournament = create(teams=2)
    service.start_tournament(tournament.id)
    (match,) = service.get_matches(tournament.id)

    live = service.update_match_score(match.id, "team-b", 2)

    assert live.status == "ongoing"
    assert live.winner == "team-b"
    node = service.get_bracket(tournament.id).get_round(1).matches[0]
    assert node.status == "ongoing" and node.team2.score == 2

    service.record_match_score(match.id, 1, 2)
    with pytest.raises(InvalidTransitionException):
        service.update_match_score(match.id, "team-a", 5)


def test_score_validation(service, create):
    tournament = create(teams=2, format="round-robin")
    (match,) = service.generate_schedule(tournament.id)

    with pytest.raises(InvalidScoreException):
        service.record_match_score(match.id, 1, 1)
    with pytest.raises(InvalidScoreException):
        service.update_match_score(match.id, "team-x", 1)
    with pytest.raises(MatchNotFoundException):
        service.record_match_score("match_missing", 1, 0)

    service.cancel_tournament(tournament.id)
    with pytest.raises(InvalidTransitionException):
        service.record_match_score(match.id, 1, 0)


# ========== Queries ==========


def test_delete_cascades_to_matches(service, create):
    tournament = create(teams=2, format="round-robin")
    (match,) = service.generate_schedule(tournament.id)

    service.delete_tournament(tournament.id)

    with pytest.raises(TournamentNotFoundException):
        service.get_tournament(tournament.id)
    with pytest.raises(MatchNotFoundException):
        service.get_match(match.id)
    assert service.list_tournaments() == []
