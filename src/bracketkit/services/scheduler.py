"""Periodic background refresh of date-driven tournament statuses."""

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
from typing import Optional

from bracketkit.controllers.tournament import RecomputeResult
from bracketkit.exceptions import BracketkitException
from bracketkit.utils import setup_logger

logger = setup_logger(__name__)


class StatusRefreshScheduler:
    """Runs ``service.recompute_all_statuses()`` every ``interval_minutes``.

    The first refresh happens as soon as the scheduler starts, so statuses
    are current after a restart without waiting a whole interval.
    """

    def __init__(self, service, interval_minutes: Optional[int] = None):
        self.service = service
        self.interval_minutes = (
            interval_minutes
            if interval_minutes is not None
            else service.settings.status_refresh_minutes
        )
        if self.interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self.runs = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> Optional[RecomputeResult]:
        """Perform one refresh; domain errors are logged, not raised."""
        try:
            result = self.service.recompute_all_statuses()
        except BracketkitException as e:
            logger.error(f"Status refresh failed: {e}")
            return None
        finally:
            self.runs += 1
        return result

    def start(self) -> None:
        if self.is_running:
            logger.warning("Status refresh scheduler already running")
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="bracketkit-status-refresh", daemon=True
        )
        self._thread.start()
        logger.info(
            f"Status refresh scheduled every {self.interval_minutes} minute(s)"
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("Status refresh scheduler stopped")

    def _run(self) -> None:
        interval = self.interval_minutes * 60
        while not self._stop_event.is_set():
            self.run_once()
            self._stop_event.wait(interval)

    def __enter__(self) -> "StatusRefreshScheduler":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()
