"""Look-ahead sweep: keep one pending instance per active recurring chain."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from lrhflow.database.repository import TaskRepository
from lrhflow.models.constants import DEFAULT_LOOKAHEAD_DAYS
from lrhflow.recurrence.generator import generate_next_instance
from lrhflow.recurrence.next_occurrence import next_occurrence

logger = logging.getLogger(__name__)


def run_lookahead_sweep(
    db: Session,
    *,
    lookahead_days: int = DEFAULT_LOOKAHEAD_DAYS,
    now: Optional[datetime] = None,
) -> int:
    """Generate the next instance for every chain head lacking a pending TODO instance.

    A chain is advanced from its latest occurrence (the head itself if it has none), one
    instance per sweep, and only when that occurrence falls inside
    [.., now + lookahead_days]. Best effort per chain: a failure on one chain is logged
    and the sweep moves on.

    Returns number of instances created.
    """
    now = now or datetime.utcnow()
    horizon = now + timedelta(days=lookahead_days)
    task_repo = TaskRepository(db)

    created = 0
    for head in task_repo.list_chain_heads():
        try:
            if task_repo.get_pending_instance(head.id, now) is not None:
                continue

            latest = task_repo.get_latest_in_chain(head.id) or head
            base = latest.occurrence_date or latest.due_date or now
            if next_occurrence(base, latest.recurrence_rule) > horizon:
                logger.debug(f"Next occurrence of chain {head.id} is beyond the look-ahead window")
                continue

            if generate_next_instance(db, latest, now=now) is not None:
                created += 1
        except Exception as e:
            db.rollback()
            logger.error(f"Look-ahead sweep failed for chain {head.id}: {type(e).__name__}: {str(e)}")
            continue

    logger.info(f"Generated {created} upcoming recurring task instances")
    return created
