"""Recurrence rule model for LRH Flow.

A rule is stored inline on the task row (recurrence_* columns); this model is the
canonical in-memory view of those columns.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Offset-aware datetimes become naive UTC; naive values are taken as UTC already."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class RecurrenceType(str, Enum):
    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    YEARLY = "YEARLY"


class RecurrenceRule(BaseModel):
    """Recurrence definition.

    Notes:
    - `day_of_week` uses 0=Sunday ... 6=Saturday and only applies to WEEKLY rules.
    - `day_of_month` only applies to MONTHLY rules and is clamped to the target month length.
    """

    type: RecurrenceType = RecurrenceType.NONE
    interval: int = Field(1, ge=1, description="Every N units (days/weeks/months/years)")
    day_of_week: Optional[int] = Field(None, ge=0, le=6, description="Weekly anchor, 0=Sunday")
    day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Monthly anchor")
    end_date: Optional[datetime] = Field(None, description="Last allowed occurrence")

    @field_validator("interval", mode="before")
    @classmethod
    def _default_interval(cls, v):
        # Stored rows may carry NULL or 0; both mean "every period".
        if v is None or v == 0:
            return 1
        return v

    @field_validator("end_date")
    @classmethod
    def _end_date_naive_utc(cls, v):
        return to_naive_utc(v)
