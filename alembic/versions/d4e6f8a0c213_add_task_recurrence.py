"""Add recurrence columns and chain linkage to tasks

Revision ID: d4e6f8a0c213
Revises: a1f3c5e7b901
Create Date: 2025-12-15
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "d4e6f8a0c213"
down_revision: Union[str, Sequence[str], None] = "a1f3c5e7b901"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.add_column("tasks", sa.Column("is_recurring", sa.Boolean(), nullable=False, server_default=sa.false()))
    op.add_column("tasks", sa.Column("recurrence_type", sa.String(), nullable=False, server_default="NONE"))
    op.add_column("tasks", sa.Column("recurrence_interval", sa.Integer(), nullable=True, server_default="1"))
    op.add_column("tasks", sa.Column("recurrence_day_of_week", sa.Integer(), nullable=True))
    op.add_column("tasks", sa.Column("recurrence_day_of_month", sa.Integer(), nullable=True))
    op.add_column("tasks", sa.Column("recurrence_end_date", sa.DateTime(), nullable=True))
    op.add_column("tasks", sa.Column("parent_recurring_task_id", sa.String(), nullable=True))
    op.add_column("tasks", sa.Column("occurrence_date", sa.DateTime(), nullable=True))
    op.create_index(op.f("ix_tasks_parent_recurring_task_id"), "tasks", ["parent_recurring_task_id"], unique=False)
    op.create_index(
        "ix_tasks_chain_status_due",
        "tasks",
        ["parent_recurring_task_id", "status", "due_date"],
        unique=False,
    )
    with op.batch_alter_table("tasks") as batch_op:
        batch_op.create_unique_constraint(
            "uq_task_recurring_occurrence",
            ["parent_recurring_task_id", "occurrence_date"],
        )


def downgrade() -> None:
    """Downgrade schema."""
    with op.batch_alter_table("tasks") as batch_op:
        batch_op.drop_constraint("uq_task_recurring_occurrence", type_="unique")
    op.drop_index("ix_tasks_chain_status_due", table_name="tasks")
    op.drop_index(op.f("ix_tasks_parent_recurring_task_id"), table_name="tasks")
    op.drop_column("tasks", "occurrence_date")
    op.drop_column("tasks", "parent_recurring_task_id")
    op.drop_column("tasks", "recurrence_end_date")
    op.drop_column("tasks", "recurrence_day_of_month")
    op.drop_column("tasks", "recurrence_day_of_week")
    op.drop_column("tasks", "recurrence_interval")
    op.drop_column("tasks", "recurrence_type")
    op.drop_column("tasks", "is_recurring")
