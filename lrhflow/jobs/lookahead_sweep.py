"""Scheduled job: materialize upcoming recurring task instances and send overdue notices.

Intended to be executed periodically (cron / Cloud Run Job), e.g.
`python -m lrhflow.jobs.lookahead_sweep`.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

from lrhflow.database.database import SessionLocal
from lrhflow.models.constants import DEFAULT_LOOKAHEAD_DAYS
from lrhflow.notifications.dispatcher import NotificationDispatcher, get_dispatcher
from lrhflow.recurrence import run_lookahead_sweep, run_overdue_check

load_dotenv()

logger = logging.getLogger(__name__)

LOOKAHEAD_DAYS = int(os.getenv("RECURRING_LOOKAHEAD_DAYS", str(DEFAULT_LOOKAHEAD_DAYS)))


def run(
    session_factory=SessionLocal,
    *,
    dispatcher: Optional[NotificationDispatcher] = None,
    lookahead_days: int = LOOKAHEAD_DAYS,
    now: Optional[datetime] = None,
) -> dict:
    """Run the sweep and the overdue check in one session; return both counts."""
    now = now or datetime.utcnow()
    dispatcher = dispatcher or get_dispatcher()
    db = session_factory()
    try:
        generated = run_lookahead_sweep(db, lookahead_days=lookahead_days, now=now)
        overdue = run_overdue_check(db, dispatcher, now=now)
    finally:
        db.close()
    return {"generated": generated, "overdue_notified": overdue}


def main() -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    try:
        result = run()
    except Exception as e:
        logger.error(f"Recurring task job failed: {type(e).__name__}: {str(e)}")
        return 1
    logger.info(
        f"Recurring task job finished: {result['generated']} generated, "
        f"{result['overdue_notified']} overdue notified"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
