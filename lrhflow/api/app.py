"""FastAPI web application for LRH Flow (recurring task endpoints)."""

import logging
from datetime import datetime
from typing import List, Optional
from fastapi import Depends, FastAPI, HTTPException, Query, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.orm import Session

from lrhflow.auth.dependencies import get_current_user, require_roles
from lrhflow.database.database import get_db
from lrhflow.database.repository import TaskRepository
from lrhflow.database.user_repository import UserRepository
from lrhflow.models.constants import DEFAULT_LOOKAHEAD_DAYS
from lrhflow.models.recurrence import RecurrenceRule, to_naive_utc
from lrhflow.models.task import HierarchyLevel, Task, TaskStatus
from lrhflow.models.task_factory import create_task_base
from lrhflow.models.user import User, UserRole
from lrhflow.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from lrhflow.recurrence import next_occurrence, on_task_completed, run_lookahead_sweep

logger = logging.getLogger(__name__)

app = FastAPI(
    title="LRH Flow API",
    description="Organizational task management with recurring task scheduling",
    version="0.1.0",
)


# Request models
class TaskCreateRequest(BaseModel):
    title: str = Field(..., min_length=1)
    responsible_user_id: str
    department_id: str
    hierarchy_level: HierarchyLevel
    parent_item_id: str
    due_date: Optional[datetime] = None
    recurrence: Optional[RecurrenceRule] = None

    @field_validator("due_date")
    @classmethod
    def _due_date_naive_utc(cls, v):
        return to_naive_utc(v)


class StatusUpdateRequest(BaseModel):
    status: TaskStatus


class PreviewRequest(BaseModel):
    from_date: datetime
    rule: RecurrenceRule

    @field_validator("from_date")
    @classmethod
    def _from_date_naive_utc(cls, v):
        return to_naive_utc(v)


# Response models
class TaskResponse(BaseModel):
    task: Task


class StatusUpdateResponse(BaseModel):
    task: Task
    next_instance: Optional[Task] = None


class ChainResponse(BaseModel):
    tasks: List[Task]
    count: int


class PreviewResponse(BaseModel):
    next_occurrence: datetime


class SweepResponse(BaseModel):
    generated_count: int


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a task, optionally with a recurrence rule (it becomes a chain head)."""
    if UserRepository(db).get(request.responsible_user_id) is None:
        raise HTTPException(status_code=400, detail="Responsible user not found")
    if request.recurrence is not None and request.recurrence.end_date is not None and request.due_date is not None:
        if request.recurrence.end_date < request.due_date:
            raise HTTPException(status_code=400, detail="Recurrence end date is before the due date")

    task = create_task_base(
        title=request.title,
        responsible_user_id=request.responsible_user_id,
        creator_id=current_user.id,
        department_id=request.department_id,
        hierarchy_level=request.hierarchy_level,
        parent_item_id=request.parent_item_id,
        due_date=request.due_date,
        recurrence=request.recurrence,
    )
    try:
        created = TaskRepository(db).create(task)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")
    return TaskResponse(task=created)


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task = TaskRepository(db).get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    return TaskResponse(task=task)


@app.put("/tasks/{task_id}/status", response_model=StatusUpdateResponse)
def update_task_status(
    task_id: str,
    request: StatusUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_dispatcher),
):
    """Persist a status change; a transition into DONE advances the recurring chain."""
    task_repo = TaskRepository(db)
    existing = task_repo.get(task_id)
    if existing is None:
        raise HTTPException(status_code=404, detail="Task not found")

    try:
        updated = task_repo.update_status(task_id, request.status)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to update task status: {str(e)}")

    next_instance = None
    if updated.status == TaskStatus.DONE and existing.status != TaskStatus.DONE:
        try:
            next_instance = on_task_completed(db, task_id)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to schedule next occurrence: {str(e)}")
        if updated.repeats:
            _notify_completion(db, dispatcher, updated, current_user)

    return StatusUpdateResponse(task=updated, next_instance=next_instance)


def _notify_completion(db: Session, dispatcher: NotificationDispatcher, task: Task, completed_by: User) -> None:
    user_repo = UserRepository(db)
    responsible = user_repo.get(task.responsible_user_id)
    recipient = None
    if responsible is not None and responsible.supervisor_id:
        recipient = user_repo.get(responsible.supervisor_id)
    if recipient is None:
        # Top of the hierarchy reports to the CEO.
        recipient = user_repo.find_first_by_role(UserRole.CEO)
    if recipient is None or recipient.id == completed_by.id:
        logger.debug(f"No supervisor to notify for completed task {task.id}")
        return
    dispatcher.recurring_task_completed(task, completed_by, recipient)


@app.get("/tasks/{task_id}/chain", response_model=ChainResponse)
def get_task_chain(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """The recurring chain a task belongs to: head first, then instances by date."""
    task_repo = TaskRepository(db)
    task = task_repo.get(task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    chain = task_repo.list_chain(task.chain_head_id)
    return ChainResponse(tasks=chain, count=len(chain))


@app.post("/recurrence/preview", response_model=PreviewResponse)
def preview_next_occurrence(
    request: PreviewRequest,
    current_user: User = Depends(get_current_user),
):
    """Next due date for a rule before it is saved."""
    return PreviewResponse(next_occurrence=next_occurrence(request.from_date, request.rule))


@app.post("/recurrence/sweep", response_model=SweepResponse)
def trigger_lookahead_sweep(
    lookahead_days: int = Query(DEFAULT_LOOKAHEAD_DAYS, ge=0),
    current_user: User = Depends(require_roles(UserRole.CEO, UserRole.EXECUTIVE)),
    db: Session = Depends(get_db),
):
    """Run the look-ahead sweep on demand."""
    return SweepResponse(generated_count=run_lookahead_sweep(db, lookahead_days=lookahead_days))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
