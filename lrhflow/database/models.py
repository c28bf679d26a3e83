"""SQLAlchemy database models for LRH Flow."""

from datetime import datetime
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, ForeignKey, Index, UniqueConstraint

from enum import Enum
from typing import Optional, Type, TypeVar, Union
from lrhflow.database.database import Base
from lrhflow.models.task import TaskStatus, HierarchyLevel
from lrhflow.models.recurrence import RecurrenceType
from lrhflow.models.user import UserRole

T = TypeVar('T')


def enum_to_value(enum_obj: Union[str, T]) -> str:
    """Storage string for an enum member (plain strings pass through)."""
    return enum_obj.value if isinstance(enum_obj, Enum) else str(enum_obj)


def value_to_enum(value: Optional[str], enum_class: Type[T], default: T) -> T:
    """Parse a stored string case-insensitively; unknown or empty values give `default`."""
    if not value:
        return default
    try:
        return enum_class(value.upper())
    except (ValueError, AttributeError):
        return default


class TaskDB(Base):
    """Database model for Task."""

    __tablename__ = "tasks"
    __table_args__ = (
        # Prevent duplicate generation of the same occurrence for a chain.
        # Note: NULL values do not participate (chain heads and non-recurring tasks are unaffected).
        UniqueConstraint("parent_recurring_task_id", "occurrence_date", name="uq_task_recurring_occurrence"),
        Index("ix_tasks_chain_status_due", "parent_recurring_task_id", "status", "due_date"),
    )

    # Primary key
    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    title = Column(String, nullable=False)
    status = Column(String, nullable=False, default=TaskStatus.TODO.value, index=True)

    # Ownership and hierarchy placement (opaque to the recurrence engine)
    responsible_user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    creator_id = Column(String, ForeignKey("users.id"), nullable=False)
    department_id = Column(String, nullable=False, index=True)
    hierarchy_level = Column(String, nullable=False)
    parent_item_id = Column(String, nullable=False)

    # Dates
    due_date = Column(DateTime, nullable=True, index=True)
    occurrence_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    last_updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)

    # Recurrence
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_type = Column(String, nullable=False, default=RecurrenceType.NONE.value)
    recurrence_interval = Column(Integer, nullable=True, default=1)
    recurrence_day_of_week = Column(Integer, nullable=True)
    recurrence_day_of_month = Column(Integer, nullable=True)
    recurrence_end_date = Column(DateTime, nullable=True)
    parent_recurring_task_id = Column(String, nullable=True, index=True)

    def to_pydantic(self):
        from lrhflow.models.task import Task

        return Task(
            id=self.id,
            title=self.title,
            status=value_to_enum(self.status, TaskStatus, TaskStatus.TODO),
            responsible_user_id=self.responsible_user_id,
            creator_id=self.creator_id,
            department_id=self.department_id,
            hierarchy_level=value_to_enum(self.hierarchy_level, HierarchyLevel, HierarchyLevel.INSTRUCTION),
            parent_item_id=self.parent_item_id,
            due_date=self.due_date,
            occurrence_date=self.occurrence_date,
            created_at=self.created_at,
            last_updated_at=self.last_updated_at,
            is_recurring=bool(self.is_recurring),
            # Unrecognized stored types read as NONE, which disables advancement.
            recurrence_type=value_to_enum(self.recurrence_type, RecurrenceType, RecurrenceType.NONE),
            recurrence_interval=self.recurrence_interval or 1,
            recurrence_day_of_week=self.recurrence_day_of_week,
            recurrence_day_of_month=self.recurrence_day_of_month,
            recurrence_end_date=self.recurrence_end_date,
            parent_recurring_task_id=self.parent_recurring_task_id,
        )

    @classmethod
    def from_pydantic(cls, task):
        return cls(
            id=task.id,
            title=task.title,
            status=enum_to_value(task.status),
            responsible_user_id=task.responsible_user_id,
            creator_id=task.creator_id,
            department_id=task.department_id,
            hierarchy_level=enum_to_value(task.hierarchy_level),
            parent_item_id=task.parent_item_id,
            due_date=task.due_date,
            occurrence_date=task.occurrence_date,
            created_at=task.created_at,
            last_updated_at=task.last_updated_at,
            is_recurring=task.is_recurring,
            recurrence_type=enum_to_value(task.recurrence_type),
            recurrence_interval=task.recurrence_interval,
            recurrence_day_of_week=task.recurrence_day_of_week,
            recurrence_day_of_month=task.recurrence_day_of_month,
            recurrence_end_date=task.recurrence_end_date,
            parent_recurring_task_id=task.parent_recurring_task_id,
        )


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))

    # User profile
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default=UserRole.USER.value, index=True)
    supervisor_id = Column(String, ForeignKey("users.id"), nullable=True)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from lrhflow.models.user import User
        return User(
            id=self.id,
            email=self.email,
            name=self.name,
            role=value_to_enum(self.role, UserRole, UserRole.USER),
            supervisor_id=self.supervisor_id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    @classmethod
    def from_pydantic(cls, user):
        """Create database model from Pydantic model."""
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            role=enum_to_value(user.role),
            supervisor_id=user.supervisor_id,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
