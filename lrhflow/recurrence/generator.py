"""Materialize the next instance of a recurring task chain."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from lrhflow.database.repository import TaskRepository
from lrhflow.models.task import Task
from lrhflow.models.task_factory import create_next_instance
from lrhflow.recurrence.next_occurrence import next_occurrence

logger = logging.getLogger(__name__)


def generate_next_instance(
    db: Session,
    template: Task,
    *,
    now: Optional[datetime] = None,
) -> Optional[Task]:
    """Create the instance following `template` in its chain.

    Not idempotent on its own: the caller guards against pending duplicates. A second
    insert for the same occurrence date is rejected by the storage layer and reported
    here as None.

    Returns the created task, or None when nothing was generated.
    """
    if not template.repeats:
        return None

    now = now or datetime.utcnow()
    rule = template.recurrence_rule

    if rule.end_date is not None and rule.end_date < now:
        logger.info(f"Recurring task {template.id} has ended")
        return None

    base = template.occurrence_date or template.due_date or now
    upcoming = next_occurrence(base, rule)

    if rule.end_date is not None and upcoming > rule.end_date:
        logger.info(f"Next occurrence would exceed end date for task {template.id}")
        return None

    created = TaskRepository(db).create_occurrence(create_next_instance(template, upcoming))
    if created is not None:
        logger.info(f"Generated recurring task instance {created.id} for {upcoming.isoformat()}")
    return created


def on_task_completed(
    db: Session,
    task_id: str,
    *,
    now: Optional[datetime] = None,
) -> Optional[Task]:
    """Completion hook: generate the next instance when a recurring task is marked DONE.

    Missing and non-recurring tasks are a no-op.
    """
    task = TaskRepository(db).get(task_id)
    if task is None:
        logger.info(f"Completed task {task_id} not found; skipping recurrence")
        return None
    if not task.repeats:
        return None
    return generate_next_instance(db, task, now=now)
