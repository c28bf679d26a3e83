"""Constants for LRH Flow.

This module centralizes magic numbers and default values used throughout the application.
"""

from lrhflow.models.recurrence import RecurrenceType


# Recurrence defaults
DEFAULT_RECURRENCE_INTERVAL = 1
DEFAULT_RECURRENCE_TYPE = RecurrenceType.NONE

# Look-ahead sweep
DEFAULT_LOOKAHEAD_DAYS = 30

# Calendar
DAYS_PER_WEEK = 7
