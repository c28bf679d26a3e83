"""Task creation factory for LRH Flow.

This module centralizes task creation logic so user-created tasks and generated
recurring instances get consistent default values.
"""

import uuid
from datetime import datetime
from typing import Optional, Dict, Any

from lrhflow.models.task import Task, TaskStatus, HierarchyLevel
from lrhflow.models.recurrence import RecurrenceRule
from lrhflow.models.constants import DEFAULT_RECURRENCE_INTERVAL, DEFAULT_RECURRENCE_TYPE


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Returns:
        Dictionary with default task field values using constants
    """
    return {
        "status": TaskStatus.TODO,
        "due_date": None,
        "occurrence_date": None,
        "is_recurring": False,
        "recurrence_type": DEFAULT_RECURRENCE_TYPE,
        "recurrence_interval": DEFAULT_RECURRENCE_INTERVAL,
        "recurrence_day_of_week": None,
        "recurrence_day_of_month": None,
        "recurrence_end_date": None,
        "parent_recurring_task_id": None,
    }


def create_task_base(
    title: str,
    responsible_user_id: str,
    creator_id: str,
    department_id: str,
    hierarchy_level: HierarchyLevel,
    parent_item_id: str,
    due_date: Optional[datetime] = None,
    recurrence: Optional[RecurrenceRule] = None,
) -> Task:
    """Create a task with defaults, allowing overrides.

    A task is recurring when a rule with a type other than NONE is given. The head
    of a new chain uses its due date as its first occurrence date.

    Args:
        title: Task title (required)
        responsible_user_id: The single responsible user
        creator_id: User creating the task
        department_id: Owning department
        hierarchy_level: Level of the parent hierarchy item
        parent_item_id: Id of the parent hierarchy item
        due_date: Optional due date
        recurrence: Optional recurrence rule

    Returns:
        Task object with defaults applied
    """
    now = datetime.utcnow()
    defaults = create_task_defaults()

    fields = dict(defaults)
    fields["due_date"] = due_date
    if recurrence is not None and recurrence.type != DEFAULT_RECURRENCE_TYPE:
        fields.update(
            {
                "is_recurring": True,
                "recurrence_type": recurrence.type,
                "recurrence_interval": recurrence.interval,
                "recurrence_day_of_week": recurrence.day_of_week,
                "recurrence_day_of_month": recurrence.day_of_month,
                "recurrence_end_date": recurrence.end_date,
                "occurrence_date": due_date,
            }
        )

    return Task(
        id=str(uuid.uuid4()),
        title=title,
        responsible_user_id=responsible_user_id,
        creator_id=creator_id,
        department_id=department_id,
        hierarchy_level=hierarchy_level,
        parent_item_id=parent_item_id,
        created_at=now,
        last_updated_at=now,
        **fields,
    )


def create_next_instance(template: Task, occurrence: datetime) -> Task:
    """Build the next chain instance from a template task.

    Copies title, responsible party, department, hierarchy placement, creator and all
    recurrence fields verbatim. The instance points at the chain head, never at itself.
    """
    now = datetime.utcnow()
    return Task(
        id=str(uuid.uuid4()),
        title=template.title,
        status=TaskStatus.TODO,
        responsible_user_id=template.responsible_user_id,
        creator_id=template.creator_id,
        department_id=template.department_id,
        hierarchy_level=template.hierarchy_level,
        parent_item_id=template.parent_item_id,
        due_date=occurrence,
        occurrence_date=occurrence,
        created_at=now,
        last_updated_at=now,
        is_recurring=True,
        recurrence_type=template.recurrence_type,
        recurrence_interval=template.recurrence_interval,
        recurrence_day_of_week=template.recurrence_day_of_week,
        recurrence_day_of_month=template.recurrence_day_of_month,
        recurrence_end_date=template.recurrence_end_date,
        parent_recurring_task_id=template.chain_head_id,
    )
