"""Data models for LRH Flow."""

from lrhflow.models.task import Task, TaskStatus, HierarchyLevel
from lrhflow.models.recurrence import RecurrenceRule, RecurrenceType
from lrhflow.models.user import User, UserRole

__all__ = [
    "Task",
    "TaskStatus",
    "HierarchyLevel",
    "RecurrenceRule",
    "RecurrenceType",
    "User",
    "UserRole",
]
