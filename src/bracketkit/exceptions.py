"""Exceptions for use in Bracketkit"""

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


# ========== Base Application Exception ==========


class BracketkitException(Exception):
    """Base exception for all Bracketkit errors.

    All custom exceptions in the package inherit from this class.
    This enables catching all application-specific errors with a single except clause.
    """

    pass


# ========== Validation Exceptions ==========


class ValidationException(BracketkitException):
    """Base exception for requests rejected by a domain rule."""

    pass


class DuplicateRegistrationException(ValidationException):
    """Raised when a team is already registered in the tournament."""

    pass


class TournamentFullException(ValidationException):
    """Raised when the tournament has reached its team capacity."""

    pass


class RegistrationClosedException(ValidationException):
    """Raised when registering into a tournament that is not upcoming."""

    pass


class InsufficientTeamsException(ValidationException):
    """Raised when fewer than two teams are admitted."""

    pass


class InvalidScoreException(ValidationException):
    """Raised when a submitted result cannot decide a winner."""

    pass


class InvalidTournamentDataException(ValidationException):
    """Raised when tournament creation parameters are invalid."""

    pass


class TeamGameMismatchException(ValidationException):
    """Raised when a team plays a different game than the tournament."""

    pass


# ========== Not Found Exceptions ==========


class NotFoundException(BracketkitException):
    """Base exception for missing entities."""

    pass


class TournamentNotFoundException(NotFoundException):
    """Raised when a requested tournament does not exist."""

    pass


class TeamNotFoundException(NotFoundException):
    """Raised when a requested team does not exist."""

    pass


class NotRegisteredException(TeamNotFoundException):
    """Raised when a team is not registered in the tournament."""

    pass


class MatchNotFoundException(NotFoundException):
    """Raised when a requested match does not exist."""

    pass


# ========== State Conflict Exceptions ==========


class StateConflictException(BracketkitException):
    """Base exception for operations invalid in the current state."""

    pass


class ScheduleExistsException(StateConflictException):
    """Raised when generating a schedule for a tournament that has matches."""

    pass


class BracketExistsException(StateConflictException):
    """Raised when generating a bracket for a tournament that has one."""

    pass


class InvalidTransitionException(StateConflictException):
    """Raised when a lifecycle transition is not allowed from the current status."""

    pass


class ResultLockedException(StateConflictException):
    """Raised when changing a result whose winner has already played on."""

    pass


class ConcurrentModificationException(StateConflictException):
    """Raised when a stored tournament changed since it was loaded."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(BracketkitException):
    """Base exception for resource-related errors."""

    pass


class FileLoadException(ResourceException):
    """Raised when a file cannot be loaded."""

    pass


class FileSaveException(ResourceException):
    """Raised when a file cannot be saved."""

    pass


class StoreLockedException(ResourceException):
    """Raised when another process holds the store lock for too long."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(BracketkitException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass


class MissingConfigurationException(ConfigurationException):
    """Raised when required configuration is missing."""

    pass
