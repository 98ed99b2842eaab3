"""Notification collaborator: structured tournament events."""

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
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from bracketkit.constants import EVENT_KINDS
from bracketkit.utils import setup_logger
from bracketkit.utils.dates import to_iso, utcnow

logger = setup_logger(__name__)


@dataclass(frozen=True)
class TournamentEvent:
    """An event handed to the notification sender.

    Attributes
    ----------
    kind : str
        One of "bracket_generated", "tournament_started",
        "tournament_completed", "team_approved" or "team_rejected".
    tournament_id : str
        Tournament the event belongs to.
    team_id : str or None
        Team concerned, for team events.
    payload : dict
        Extra event data (tournament name, winner, ...).
    created_at : datetime
        When the event was raised.
    """

    kind: str
    tournament_id: str
    team_id: Optional[str] = None
    payload: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.kind not in EVENT_KINDS:
            raise ValueError(f"Unknown event kind: {self.kind!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "tournament_id": self.tournament_id,
            "team_id": self.team_id,
            "payload": dict(self.payload),
            "created_at": to_iso(self.created_at),
        }


class Notifier(ABC):
    """Delivers tournament events to whoever should hear about them."""

    @abstractmethod
    def send(self, event: TournamentEvent) -> None:
        pass


class LoggingNotifier(Notifier):
    """Default notifier: writes events to the log."""

    def send(self, event: TournamentEvent) -> None:
        target = f" team={event.team_id}" if event.team_id else ""
        logger.info(f"Event {event.kind}: tournament={event.tournament_id}{target}")


class MemoryNotifier(Notifier):
    """Keeps sent events in order, as an outbox for later delivery."""

    def __init__(self) -> None:
        self.events: List[TournamentEvent] = []
        self._lock = threading.Lock()

    def send(self, event: TournamentEvent) -> None:
        with self._lock:
            self.events.append(event)

    def kinds(self) -> List[str]:
        with self._lock:
            return [event.kind for event in self.events]

    def drain(self) -> List[TournamentEvent]:
        """Return and forget all collected events."""
        with self._lock:
            events, self.events = self.events, []
        return events
