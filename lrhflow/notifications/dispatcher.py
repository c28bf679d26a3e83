"""Notification dispatcher for recurring task events.

Transport is pluggable: the default dispatcher only logs the rendered message.
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from lrhflow.models.task import Task
from lrhflow.models.user import User

load_dotenv()

logger = logging.getLogger(__name__)

NOTIFICATIONS_ENABLED = os.getenv("NOTIFICATIONS_ENABLED", "True").lower() == "true"

SIGNATURE = "This email was sent automatically by LRH Flow."


class Notification(BaseModel):
    """A single outbound message."""

    recipient: str = Field(..., description="Recipient email address")
    subject: str
    body: str


class NotificationDispatcher:
    """Base dispatcher. Subclasses implement `send`."""

    def send(self, notification: Notification) -> bool:
        raise NotImplementedError

    def _safe_send(self, notification: Notification) -> bool:
        # A failed notification never fails the operation that triggered it.
        try:
            return self.send(notification)
        except Exception as e:
            logger.error(
                f"Failed to send notification to {notification.recipient}: {type(e).__name__}: {str(e)}"
            )
            return False

    def recurring_task_completed(self, task: Task, completed_by: User, recipient: User) -> bool:
        """Tell the department head (or supervisor) that a recurring task was finished."""
        when = task.last_updated_at.strftime("%Y-%m-%d %H:%M")
        return self._safe_send(
            Notification(
                recipient=recipient.email,
                subject=f"{completed_by.name} completed: {task.title}",
                body=(
                    f"Hello,\n\n{completed_by.name} completed the following recurring task:\n\n"
                    f"Task: {task.title}\nCompleted by: {completed_by.name}\nDate: {when}\n\n---\n{SIGNATURE}"
                ),
            )
        )

    def recurring_task_overdue(self, task: Task, assignee: User, supervisor: Optional[User] = None) -> int:
        """Warn the assignee, and their supervisor if any. Returns number of messages sent."""
        due = task.due_date.strftime("%Y-%m-%d") if task.due_date else "-"
        messages: List[Notification] = [
            Notification(
                recipient=assignee.email,
                subject=f"Overdue task: {task.title}",
                body=(
                    f"Hello {assignee.name},\n\nThe following recurring task was not completed on time:\n\n"
                    f"Task: {task.title}\nDue: {due}\n\n"
                    f"Please complete it as soon as possible.\n\n---\n{SIGNATURE}"
                ),
            )
        ]
        if supervisor is not None:
            messages.append(
                Notification(
                    recipient=supervisor.email,
                    subject=f"Subordinate has an overdue task: {task.title}",
                    body=(
                        f"Hello {supervisor.name},\n\n{assignee.name} has not completed the following "
                        f"recurring task:\n\nTask: {task.title}\nDue: {due}\n\n---\n{SIGNATURE}"
                    ),
                )
            )
        return sum(1 for m in messages if self._safe_send(m))


class LoggingNotificationDispatcher(NotificationDispatcher):
    """Writes notifications to the log instead of an email transport."""

    def send(self, notification: Notification) -> bool:
        logger.info(f"Notification to {notification.recipient}: {notification.subject}")
        return True


class NullNotificationDispatcher(NotificationDispatcher):
    """Drops every notification."""

    def send(self, notification: Notification) -> bool:
        return False


def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher selected by `NOTIFICATIONS_ENABLED` (dependency for FastAPI)."""
    if NOTIFICATIONS_ENABLED:
        return LoggingNotificationDispatcher()
    return NullNotificationDispatcher()
