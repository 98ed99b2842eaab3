"""Who controls a tournament's status: the calendar or an explicit action."""

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

from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Union

from bracketkit.constants import STATUS_UPCOMING, TOURNAMENT_STATUSES


@dataclass(frozen=True)
class AutoStatus:
    """Status computed from the tournament's start and end dates."""

    status: str = STATUS_UPCOMING
    manual: ClassVar[bool] = False
    mode: ClassVar[str] = "auto"


@dataclass(frozen=True)
class ManualStatus:
    """Status set explicitly by start, end or cancel; dates no longer apply."""

    status: str
    manual: ClassVar[bool] = True
    mode: ClassVar[str] = "manual"


StatusControl = Union[AutoStatus, ManualStatus]


def status_control_to_dict(control: StatusControl) -> Dict[str, Any]:
    """Serialize a status control to dictionary."""
    return {"mode": control.mode, "status": control.status}


def status_control_from_dict(data: Dict[str, Any]) -> StatusControl:
    """Deserialize a status control from dictionary."""
    status = data.get("status", STATUS_UPCOMING)
    if status not in TOURNAMENT_STATUSES:
        raise ValueError(f"Unknown tournament status: {status!r}")
    if data.get("mode") == ManualStatus.mode:
        return ManualStatus(status)
    return AutoStatus(status)
