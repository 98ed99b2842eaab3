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

# --- Constants ---
SAVE_FILE_EXTENSION = ".json"
STORE_LOCK_TIMEOUT_SECONDS = 10

# Tournament formats
FORMAT_SINGLE_ELIMINATION = "single-elimination"
FORMAT_DOUBLE_ELIMINATION = "double-elimination"
FORMAT_ROUND_ROBIN = "round-robin"
DEFAULT_FORMAT = FORMAT_SINGLE_ELIMINATION

TOURNAMENT_FORMATS = (
    FORMAT_SINGLE_ELIMINATION,
    FORMAT_DOUBLE_ELIMINATION,
    FORMAT_ROUND_ROBIN,
)
ELIMINATION_FORMATS = (FORMAT_SINGLE_ELIMINATION, FORMAT_DOUBLE_ELIMINATION)

# Tournament status
STATUS_UPCOMING = "upcoming"
STATUS_ONGOING = "ongoing"
STATUS_COMPLETED = "completed"
STATUS_CANCELLED = "cancelled"

TOURNAMENT_STATUSES = (
    STATUS_UPCOMING,
    STATUS_ONGOING,
    STATUS_COMPLETED,
    STATUS_CANCELLED,
)

# Admission status of a registered team
ADMISSION_REGISTERED = "registered"
ADMISSION_CONFIRMED = "confirmed"
ADMISSION_ELIMINATED = "eliminated"
ADMISSION_WITHDRAWN = "withdrawn"

ADMITTED_STATUSES = (ADMISSION_REGISTERED, ADMISSION_CONFIRMED)

# Match status
MATCH_PENDING = "pending"
MATCH_ONGOING = "ongoing"
MATCH_COMPLETED = "completed"
MATCH_CANCELLED = "cancelled"

# Standings awards
WIN_POINTS = 3
LOSS_POINTS = 0

# Scheduling defaults (minutes / hours)
MATCH_DURATION_MINUTES = 60
MATCH_GAP_MINUTES = 30
ADVANCE_DELAY_HOURS = 24
STATUS_REFRESH_MINUTES = 60

# Bracket placeholders and round names
TBD_NAME = "TBD"
ROUND_NAME_FINAL = "Final"
ROUND_NAME_SEMI_FINALS = "Semi-Finals"
ROUND_NAME_QUARTER_FINALS = "Quarter-Finals"

# Notification event kinds
EVENT_BRACKET_GENERATED = "bracket_generated"
EVENT_TOURNAMENT_STARTED = "tournament_started"
EVENT_TOURNAMENT_COMPLETED = "tournament_completed"
EVENT_TEAM_APPROVED = "team_approved"
EVENT_TEAM_REJECTED = "team_rejected"

EVENT_KINDS = (
    EVENT_BRACKET_GENERATED,
    EVENT_TOURNAMENT_STARTED,
    EVENT_TOURNAMENT_COMPLETED,
    EVENT_TEAM_APPROVED,
    EVENT_TEAM_REJECTED,
)
