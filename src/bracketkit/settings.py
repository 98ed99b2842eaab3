"""Engine settings shared by the scheduling, bracket and standings managers."""

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
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Union

from dateutil.relativedelta import relativedelta

from bracketkit.constants import (
    ADVANCE_DELAY_HOURS,
    LOSS_POINTS,
    MATCH_DURATION_MINUTES,
    MATCH_GAP_MINUTES,
    STATUS_REFRESH_MINUTES,
    WIN_POINTS,
)
from bracketkit.exceptions import (
    InvalidConfigurationException,
    MissingConfigurationException,
)


@dataclass(frozen=True)
class EngineSettings:
    """Tunable values for a tournament engine.

    Attributes
    ----------
    match_duration_minutes : int
        Expected length of one match.
    match_gap_minutes : int
        Break between two consecutively scheduled matches.
    win_points : int
        Points awarded to the winner of a match.
    loss_points : int
        Points awarded to the loser of a match.
    advance_delay_hours : int
        Delay before a match created by bracket advancement is scheduled.
    status_refresh_minutes : int
        Interval of the background status refresh.
    """

    match_duration_minutes: int = MATCH_DURATION_MINUTES
    match_gap_minutes: int = MATCH_GAP_MINUTES
    win_points: int = WIN_POINTS
    loss_points: int = LOSS_POINTS
    advance_delay_hours: int = ADVANCE_DELAY_HOURS
    status_refresh_minutes: int = STATUS_REFRESH_MINUTES

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidConfigurationException(
                    f"{f.name} must be an integer, got {value!r}"
                )
            if value < 0:
                raise InvalidConfigurationException(
                    f"{f.name} must not be negative, got {value}"
                )
        if self.match_duration_minutes == 0:
            raise InvalidConfigurationException("match_duration_minutes must be > 0")
        if self.status_refresh_minutes == 0:
            raise InvalidConfigurationException("status_refresh_minutes must be > 0")

    @property
    def match_slot(self) -> relativedelta:
        """Offset between the start of two consecutive scheduled matches."""
        return relativedelta(
            minutes=self.match_duration_minutes + self.match_gap_minutes
        )

    @property
    def advance_delay(self) -> relativedelta:
        """Offset applied to matches created when a winner advances."""
        return relativedelta(hours=self.advance_delay_hours)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineSettings":
        """Deserialize settings, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise InvalidConfigurationException(
                f"Unknown setting(s): {', '.join(sorted(unknown))}"
            )
        return cls(**data)


def load_settings(path: Union[str, Path]) -> EngineSettings:
    """Load engine settings from a JSON file.

    Raises:
        MissingConfigurationException: If the file does not exist
        InvalidConfigurationException: If the file is not a valid settings object
    """
    settings_path = Path(path)
    if not settings_path.exists():
        raise MissingConfigurationException(f"Settings file not found: {settings_path}")

    try:
        with open(settings_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidConfigurationException(
            f"Settings file {settings_path} is not valid JSON: {e}"
        ) from e

    if not isinstance(data, dict):
        raise InvalidConfigurationException(
            f"Settings file {settings_path} must contain a JSON object"
        )
    return EngineSettings.from_dict(data)
