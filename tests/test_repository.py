import json

import pytest
from filelock import FileLock

from bracketkit.controllers.tournament import BracketEngine, ScheduleGenerator
from bracketkit.exceptions import (
    ConcurrentModificationException,
    FileLoadException,
    FileSaveException,
    MatchNotFoundException,
    StoreLockedException,
    TournamentNotFoundException,
)
from bracketkit.models.tournament import ManualStatus, Tournament
from bracketkit.services import InMemoryRepository, JsonFileRepository


def test_commit_bumps_version_and_copies(repository, make_tournament):
    tournament = make_tournament(teams=2)

    saved = repository.commit(tournament)

    assert saved.version == 1
    assert tournament.version == 0
    loaded = repository.load_tournament(tournament.id)
    assert loaded.to_dict() == saved.to_dict()
    loaded.name = "changed"
    assert repository.load_tournament(tournament.id).name == "Spring Cup"


def test_stale_version_is_rejected(repository, make_tournament):
    saved = repository.commit(make_tournament())
    first = repository.load_tournament(saved.id)
    second = repository.load_tournament(saved.id)
    repository.commit(first)

    with pytest.raises(ConcurrentModificationException):
        repository.commit(second)


def test_matches_are_listed_in_round_order(repository, make_tournament):
    tournament, matches = ScheduleGenerator().generate(
        make_tournament(teams=4, format="round-robin")
    )
    matches[0].round = 2
    repository.commit(tournament, reversed(matches))

    listed = repository.list_matches(tournament.id)

    assert [(m.round, m.match_number) for m in listed] == [
        (1, 2), (1, 3), (1, 4), (1, 5), (1, 6), (2, 1)
    ]
    assert repository.load_match(matches[0].id).round == 2


def test_missing_records(repository):
    with pytest.raises(TournamentNotFoundException):
        repository.load_tournament("tournament_missing")
    with pytest.raises(TournamentNotFoundException):
        repository.delete_tournament("tournament_missing")
    with pytest.raises(MatchNotFoundException):
        repository.load_match("match_missing")


def test_json_store_survives_reopen(tmp_path, make_tournament):
    path = tmp_path / "store"
    repository = JsonFileRepository(path)
    tournament, matches = ScheduleGenerator().generate(make_tournament(teams=2))
    tournament.status_control = ManualStatus("ongoing")
    saved = repository.commit(tournament, matches)

    assert repository.path.name == "store.json"
    reopened = JsonFileRepository(tmp_path / "store.json")
    loaded = reopened.load_tournament(saved.id)
    assert loaded.to_dict() == saved.to_dict()
    assert loaded.status_control == ManualStatus("ongoing")
    assert [m.id for m in reopened.list_matches(saved.id)] == [matches[0].id]

    data = json.loads(repository.path.read_text(encoding="utf-8"))
    assert set(data) == {"tournaments", "matches"}


def test_json_store_delete_persists(tmp_path, make_tournament):
    repository = JsonFileRepository(tmp_path / "store.json")
    saved = repository.commit(make_tournament())

    repository.delete_tournament(saved.id)

    assert JsonFileRepository(tmp_path / "store.json").list_tournaments() == []


def test_json_store_rejects_stale_write_from_another_instance(tmp_path, make_tournament):
    path = tmp_path / "store.json"
    first = JsonFileRepository(path)
    second = JsonFileRepository(path)
    saved = first.commit(make_tournament())
    stale = second.load_tournament(saved.id)

    first.commit(first.load_tournament(saved.id))

    with pytest.raises(ConcurrentModificationException):
        second.commit(stale)
    assert JsonFileRepository(path).load_tournament(saved.id).version == 2


def test_json_store_instances_keep_each_others_tournaments(tmp_path, make_tournament):
    path = tmp_path / "store.json"
    first = JsonFileRepository(path)
    second = JsonFileRepository(path)

    one = make_tournament()
    one.name = "One"
    two = make_tournament()
    two.name = "Two"

    one = first.commit(one)
    two = second.commit(two)

    reopened = JsonFileRepository(path)
    assert {t.id for t in reopened.list_tournaments()} == {one.id, two.id}
    assert first.load_tournament(two.id).name == "Two"


def test_json_store_delete_is_seen_by_another_instance(tmp_path, make_tournament):
    path = tmp_path / "store.json"
    first = JsonFileRepository(path)
    second = JsonFileRepository(path)
    saved = first.commit(make_tournament())
    assert second.load_tournament(saved.id).id == saved.id

    first.delete_tournament(saved.id)

    with pytest.raises(TournamentNotFoundException):
        second.load_tournament(saved.id)


def test_failed_save_leaves_store_unchanged(tmp_path, make_tournament, monkeypatch):
    repository = JsonFileRepository(tmp_path / "store.json")
    kept = repository.commit(make_tournament())

    def fail(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr("bracketkit.services.repository.os.replace", fail)
    with pytest.raises(FileSaveException):
        repository.commit(make_tournament())
    monkeypatch.undo()

    assert [t.id for t in repository.list_tournaments()] == [kept.id]
    assert repository.load_tournament(kept.id).version == 1


def test_memory_store_keeps_state_when_save_fails(make_tournament, monkeypatch):
    repository = InMemoryRepository()
    kept = repository.commit(make_tournament())

    def fail(tournaments, matches):
        raise FileSaveException("unavailable")

    monkeypatch.setattr(repository, "_flush", fail)
    with pytest.raises(FileSaveException):
        repository.delete_tournament(kept.id)
    monkeypatch.undo()

    assert repository.load_tournament(kept.id).version == 1


def test_corrupt_store_raises(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(FileLoadException):
        JsonFileRepository(path)


def test_tournament_round_trip_keeps_bracket(make_tournament):
    tournament, _ = BracketEngine().generate(make_tournament(teams=3))

    restored = Tournament.from_dict(tournament.to_dict())

    assert restored.bracket == tournament.bracket
    assert restored.registered_teams == tournament.registered_teams


def test_held_store_lock_times_out(tmp_path):
    repository = JsonFileRepository(tmp_path / "store.json", lock_timeout=0.1)

    with FileLock(str(repository.lock_path)):
        with pytest.raises(StoreLockedException):
            repository.list_tournaments()

    assert repository.list_tournaments() == []
