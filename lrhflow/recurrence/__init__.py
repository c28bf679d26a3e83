"""Recurrence engine for LRH Flow."""

from lrhflow.recurrence.next_occurrence import next_occurrence
from lrhflow.recurrence.generator import generate_next_instance, on_task_completed
from lrhflow.recurrence.sweep import run_lookahead_sweep
from lrhflow.recurrence.overdue import run_overdue_check

__all__ = [
    "next_occurrence",
    "generate_next_instance",
    "on_task_completed",
    "run_lookahead_sweep",
    "run_overdue_check",
]
