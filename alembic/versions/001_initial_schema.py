"""Initial schema — service tasks, assignments, assignment history.

Revision ID: 001
Revises: None
Create Date: 2026-10-17
"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Service tasks
    op.create_table(
        "service_tasks",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("client_address", sa.String(500), nullable=False),
        sa.Column("priority", sa.String(20), nullable=False),
        sa.Column("estimated_duration", sa.Integer, nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="UNASSIGNED"),
        sa.Column("assigned_technician_id", sa.Integer, nullable=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_by", sa.String(100), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_service_tasks_status", "service_tasks", ["status"])
    op.create_index("idx_service_tasks_priority", "service_tasks", ["priority"])
    op.create_index("idx_service_tasks_technician", "service_tasks", ["assigned_technician_id"])

    # Assignments
    op.create_table(
        "assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "task_id",
            sa.Integer,
            sa.ForeignKey("service_tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("technician_id", sa.Integer, nullable=False),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("assigned_by", sa.String(100), nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        sa.Column("reason", sa.Text, nullable=True),
    )
    op.create_index("idx_assignments_task", "assignments", ["task_id"])
    op.create_index(
        "idx_assignments_technician_status", "assignments", ["technician_id", "status"]
    )
    op.create_index(
        "uq_assignments_active_task",
        "assignments",
        ["task_id"],
        unique=True,
        postgresql_where=sa.text("status = 'ACTIVE'"),
    )

    # Assignment history
    op.create_table(
        "assignment_history",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "assignment_id",
            sa.Integer,
            sa.ForeignKey("assignments.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "task_id",
            sa.Integer,
            sa.ForeignKey("service_tasks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("technician_id", sa.Integer, nullable=False),
        sa.Column("previous_technician_id", sa.Integer, nullable=True),
        sa.Column("action", sa.String(20), nullable=False),
        sa.Column("action_by", sa.String(100), nullable=False),
        sa.Column(
            "action_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("reason", sa.Text, nullable=True),
    )
    op.create_index(
        "idx_assignment_history_task", "assignment_history", ["task_id", "action_at"]
    )


def downgrade() -> None:
    op.drop_table("assignment_history")
    op.drop_table("assignments")
    op.drop_table("service_tasks")
