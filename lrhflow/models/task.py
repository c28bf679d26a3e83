"""Task data model for LRH Flow."""

from datetime import datetime
from typing import Optional
from enum import Enum
from pydantic import BaseModel, Field

from lrhflow.models.recurrence import RecurrenceRule, RecurrenceType


class TaskStatus(str, Enum):
    """Task status enumeration (only three states)."""
    TODO = "TODO"
    DOING = "DOING"
    DONE = "DONE"


class HierarchyLevel(str, Enum):
    """Ideal Scene element a task belongs to."""
    SUBGOAL = "SUBGOAL"
    PLAN = "PLAN"
    PROGRAM = "PROGRAM"
    PROJECT = "PROJECT"
    INSTRUCTION = "INSTRUCTION"


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    title: str = Field(..., description="Task title")
    status: TaskStatus = Field(TaskStatus.TODO, description="Task status")

    # Exactly one responsible person
    responsible_user_id: str = Field(..., description="User responsible for the task")
    creator_id: str = Field(..., description="User who created the task")
    department_id: str = Field(..., description="Owning department")
    hierarchy_level: HierarchyLevel = Field(..., description="Hierarchy level of the parent item")
    parent_item_id: str = Field(..., description="Subgoal/plan/program/project/instruction id")

    due_date: Optional[datetime] = Field(None, description="Optional due date")
    occurrence_date: Optional[datetime] = Field(
        None, description="For recurring instances, the date this instance represents"
    )
    created_at: datetime = Field(..., description="Task creation timestamp")
    last_updated_at: datetime = Field(..., description="Task last update timestamp (stalled detection)")

    # Recurrence
    is_recurring: bool = Field(False, description="Whether the task repeats")
    recurrence_type: RecurrenceType = Field(RecurrenceType.NONE, description="Recurrence period")
    recurrence_interval: int = Field(1, ge=1, description="Every N periods")
    recurrence_day_of_week: Optional[int] = Field(None, ge=0, le=6, description="0=Sunday ... 6=Saturday")
    recurrence_day_of_month: Optional[int] = Field(None, ge=1, le=31, description="Day of month anchor")
    recurrence_end_date: Optional[datetime] = Field(None, description="No occurrences after this date")
    parent_recurring_task_id: Optional[str] = Field(
        None, description="Chain head id (null for the head itself and for non-recurring tasks)"
    )

    class Config:
        """Pydantic configuration."""
        use_enum_values = True

    @property
    def recurrence_rule(self) -> RecurrenceRule:
        """The recurrence rule embedded in this task."""
        return RecurrenceRule(
            type=self.recurrence_type,
            interval=self.recurrence_interval,
            day_of_week=self.recurrence_day_of_week,
            day_of_month=self.recurrence_day_of_month,
            end_date=self.recurrence_end_date,
        )

    @property
    def repeats(self) -> bool:
        """True when the task takes part in recurrence generation."""
        return bool(self.is_recurring) and self.recurrence_type != RecurrenceType.NONE

    @property
    def chain_head_id(self) -> str:
        """Id of the chain head this task belongs to."""
        return self.parent_recurring_task_id or self.id
