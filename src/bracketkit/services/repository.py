"""Persistence collaborators for tournaments and matches.

Repositories store serialized copies, so values handed out are never shared
with the store. Saving a tournament checks its ``version`` against the
stored one and bumps it, which turns concurrent read-modify-write sequences
into :class:`ConcurrentModificationException` instead of lost updates.
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

import json
import os
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

from filelock import FileLock, Timeout

from bracketkit.constants import SAVE_FILE_EXTENSION, STORE_LOCK_TIMEOUT_SECONDS
from bracketkit.exceptions import (
    ConcurrentModificationException,
    FileLoadException,
    FileSaveException,
    MatchNotFoundException,
    StoreLockedException,
    TournamentNotFoundException,
)
from bracketkit.models.tournament import Match, Tournament
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)

Records = Dict[str, Dict[str, Any]]


class TournamentRepository(ABC):
    """Load/save by id for tournaments and their matches."""

    @abstractmethod
    def load_tournament(self, tournament_id: str) -> Tournament:
        """Raises TournamentNotFoundException if absent."""

    @abstractmethod
    def list_tournaments(self) -> List[Tournament]:
        pass

    @abstractmethod
    def delete_tournament(self, tournament_id: str) -> None:
        """Delete a tournament and all of its matches."""

    @abstractmethod
    def load_match(self, match_id: str) -> Match:
        """Raises MatchNotFoundException if absent."""

    @abstractmethod
    def list_matches(self, tournament_id: str) -> List[Match]:
        """Matches of a tournament ordered by round, then match number."""

    @abstractmethod
    def commit(self, tournament: Tournament, matches: Iterable[Match] = ()) -> Tournament:
        """Store a tournament together with new or changed matches.

        Returns:
            The stored tournament, with its version incremented

        Raises:
            ConcurrentModificationException: If the stored version moved on
        """


class InMemoryRepository(TournamentRepository):
    """Dictionary-backed repository, mainly for tests and embedding.

    Every operation runs inside :meth:`_locked` and starts with
    :meth:`_sync`; writes build the new state aside and hand it to
    :meth:`_store`, so subclasses only need to provide locking, reading and
    writing of their backing storage.
    """

    def __init__(self) -> None:
        self._tournaments: Records = {}
        self._matches: Records = {}
        self._lock = threading.RLock()

    def load_tournament(self, tournament_id: str) -> Tournament:
        with self._locked():
            self._sync()
            data = self._tournaments.get(tournament_id)
        if data is None:
            raise TournamentNotFoundException(f"Tournament {tournament_id} not found")
        return Tournament.from_dict(data)

    def list_tournaments(self) -> List[Tournament]:
        with self._locked():
            self._sync()
            records = list(self._tournaments.values())
        return [Tournament.from_dict(data) for data in records]

    def delete_tournament(self, tournament_id: str) -> None:
        with self._locked():
            self._sync()
            if tournament_id not in self._tournaments:
                raise TournamentNotFoundException(
                    f"Tournament {tournament_id} not found"
                )
            tournaments = {
                key: data
                for key, data in self._tournaments.items()
                if key != tournament_id
            }
            matches = {
                match_id: data
                for match_id, data in self._matches.items()
                if data["tournament_id"] != tournament_id
            }
            removed = len(self._matches) - len(matches)
            self._store(tournaments, matches)
        logger.info(f"Deleted tournament {tournament_id} and {removed} matches")

    def load_match(self, match_id: str) -> Match:
        with self._locked():
            self._sync()
            data = self._matches.get(match_id)
        if data is None:
            raise MatchNotFoundException(f"Match {match_id} not found")
        return Match.from_dict(data)

    def list_matches(self, tournament_id: str) -> List[Match]:
        with self._locked():
            self._sync()
            records = [
                data
                for data in self._matches.values()
                if data["tournament_id"] == tournament_id
            ]
        matches = [Match.from_dict(data) for data in records]
        return sorted(matches, key=lambda m: (m.round, m.match_number))

    def commit(self, tournament: Tournament, matches: Iterable[Match] = ()) -> Tournament:
        with self._locked():
            self._sync()
            stored = self._tournaments.get(tournament.id)
            if stored is not None and stored["version"] != tournament.version:
                raise ConcurrentModificationException(
                    f"Tournament {tournament.id} was modified concurrently "
                    f"(stored version {stored['version']}, "
                    f"loaded version {tournament.version})"
                )

            saved = tournament.copy()
            saved.version = tournament.version + 1
            tournaments = dict(self._tournaments)
            tournaments[saved.id] = saved.to_dict()
            new_matches = dict(self._matches)
            for match in matches:
                new_matches[match.id] = match.to_dict()
            self._store(tournaments, new_matches)
        return saved

    # ========== Storage hooks ==========

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            yield

    def _sync(self) -> None:
        """Refresh the in-memory state from storage; memory is the storage here."""

    def _flush(self, tournaments: Records, matches: Records) -> None:
        """Persist a new state; nothing to do for pure memory storage."""

    def _store(self, tournaments: Records, matches: Records) -> None:
        # Memory only takes the new state once it is persisted.
        self._flush(tournaments, matches)
        self._tournaments = tournaments
        self._matches = matches


class JsonFileRepository(InMemoryRepository):
    """Repository persisted to a single JSON save file.

    Several processes may share the file: every operation holds a lock file
    next to the store and re-reads the store first, so version checks see
    the latest saved state. The whole store is rewritten on every commit
    through a temporary file, so a crash never leaves a half-written save.
    """

    def __init__(
        self,
        path: Union[str, Path],
        lock_timeout: float = STORE_LOCK_TIMEOUT_SECONDS,
    ) -> None:
        super().__init__()
        self.path = Path(path)
        if not self.path.suffix:
            self.path = self.path.with_suffix(SAVE_FILE_EXTENSION)
        self.lock_path = self.path.with_name(self.path.name + ".lock")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file_lock = FileLock(str(self.lock_path), timeout=lock_timeout)
        with self._locked():
            self._sync()

    @contextmanager
    def _locked(self) -> Iterator[None]:
        with self._lock:
            try:
                self._file_lock.acquire()
            except Timeout as e:
                raise StoreLockedException(
                    f"Store {self.path} is locked by another process"
                ) from e
            try:
                yield
            finally:
                self._file_lock.release()

    def _sync(self) -> None:
        if not self.path.exists():
            self._tournaments, self._matches = {}, {}
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise FileLoadException(f"Cannot load store {self.path}: {e}") from e

        self._tournaments = data.get("tournaments", {})
        self._matches = data.get("matches", {})
        logger.debug(
            f"Loaded {len(self._tournaments)} tournaments and "
            f"{len(self._matches)} matches from {self.path}"
        )

    def _flush(self, tournaments: Records, matches: Records) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"tournaments": tournaments, "matches": matches}, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise FileSaveException(f"Cannot save store {self.path}: {e}") from e
