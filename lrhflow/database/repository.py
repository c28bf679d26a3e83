"""Repository layer for database operations."""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc

from lrhflow.models.task import Task, TaskStatus
from lrhflow.models.recurrence import RecurrenceType
from lrhflow.database.models import TaskDB, enum_to_value

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def create_occurrence(self, task: Task) -> Optional[Task]:
        """Insert a generated chain instance.

        Returns None when the chain already holds an instance for the same occurrence
        date (another trigger got there first). Any other failure is re-raised.
        """
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created occurrence {task.id} of chain {task.parent_recurring_task_id}")
            return task_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            if self._occurrence_exists(task.parent_recurring_task_id, task.occurrence_date):
                logger.info(
                    f"Occurrence {task.occurrence_date} of chain {task.parent_recurring_task_id} already exists"
                )
                return None
            logger.error(f"Failed to create occurrence {task.id}: {type(e).__name__}: {str(e)}")
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create occurrence {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def _occurrence_exists(self, chain_id: Optional[str], occurrence_date: Optional[datetime]) -> bool:
        if chain_id is None or occurrence_date is None:
            return False
        row = self.db.query(TaskDB.id).filter(
            TaskDB.parent_recurring_task_id == chain_id,
            TaskDB.occurrence_date == occurrence_date,
        ).first()
        return row is not None

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        return task_db.to_pydantic() if task_db else None

    def update_status(self, task_id: str, status: TaskStatus, now: Optional[datetime] = None) -> Optional[Task]:
        """Set a task's status. Returns None if the task does not exist."""
        task_db = self.db.query(TaskDB).filter(TaskDB.id == task_id).first()
        if not task_db:
            return None

        task_db.status = enum_to_value(status)
        task_db.last_updated_at = now or datetime.utcnow()
        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id} status to {task_db.status}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise

    def list_chain_heads(self) -> List[Task]:
        """Recurring template tasks (no parent reference)."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.is_recurring.is_(True),
            TaskDB.recurrence_type != RecurrenceType.NONE.value,
            TaskDB.parent_recurring_task_id.is_(None),
        ).order_by(asc(TaskDB.created_at)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_pending_instance(self, chain_id: str, now: datetime) -> Optional[Task]:
        """A TODO instance of the chain due at or after `now`, if any."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.parent_recurring_task_id == chain_id,
            TaskDB.status == TaskStatus.TODO.value,
            TaskDB.due_date >= now,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_latest_in_chain(self, chain_id: str) -> Optional[Task]:
        """Most recent occurrence of a chain, falling back to the head itself."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.parent_recurring_task_id == chain_id,
            TaskDB.occurrence_date.isnot(None),
        ).order_by(desc(TaskDB.occurrence_date)).first()
        if task_db:
            return task_db.to_pydantic()
        return self.get(chain_id)

    def list_chain(self, chain_id: str) -> List[Task]:
        """Head followed by its instances in occurrence order."""
        head = self.get(chain_id)
        if head is None:
            return []
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.parent_recurring_task_id == chain_id,
        ).order_by(asc(TaskDB.occurrence_date)).all()
        return [head] + [task_db.to_pydantic() for task_db in tasks_db]

    def list_overdue_recurring(self, now: datetime) -> List[Task]:
        """Recurring tasks still open whose due date has passed."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.is_recurring.is_(True),
            TaskDB.status != TaskStatus.DONE.value,
            TaskDB.due_date.isnot(None),
            TaskDB.due_date < now,
        ).order_by(asc(TaskDB.due_date)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]
