"""Shared helpers for Bracketkit: logging setup and identifier generation."""

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

import logging
import uuid

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_package_logger = logging.getLogger("bracketkit")
_package_logger.addHandler(logging.NullHandler())


def setup_logger(name: str) -> logging.Logger:
    """Return the module logger for ``name``.

    Handlers are left to the application; the package only attaches a
    ``NullHandler`` so library use stays silent unless logging is configured.
    """
    return logging.getLogger(name)


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logging for command line use."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def generate_id(prefix: str) -> str:
    """Generate a unique identifier such as ``match_3f2a...``."""
    return f"{prefix.lower()}_{uuid.uuid4().hex}"
