"""Overdue check for recurring task instances."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from lrhflow.database.repository import TaskRepository
from lrhflow.database.user_repository import UserRepository
from lrhflow.notifications.dispatcher import NotificationDispatcher

logger = logging.getLogger(__name__)


def run_overdue_check(
    db: Session,
    dispatcher: NotificationDispatcher,
    *,
    now: Optional[datetime] = None,
) -> int:
    """Notify assignees (and their supervisors) about open recurring tasks past due.

    Returns number of overdue tasks notified about.
    """
    now = now or datetime.utcnow()
    task_repo = TaskRepository(db)
    user_repo = UserRepository(db)

    notified = 0
    for task in task_repo.list_overdue_recurring(now):
        assignee = user_repo.get(task.responsible_user_id)
        if assignee is None:
            logger.warning(f"Overdue task {task.id} has no resolvable assignee")
            continue
        supervisor = user_repo.get(assignee.supervisor_id) if assignee.supervisor_id else None
        if dispatcher.recurring_task_overdue(task, assignee, supervisor) > 0:
            notified += 1

    logger.info(f"Sent overdue notifications for {notified} recurring tasks")
    return notified
