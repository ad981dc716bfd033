"""create workflow_definition, task and status_time_log tables

Revision ID: a7c3e91f0b12
Revises:
Create Date: 2026-10-19

workflow_definition holds the JSONB status graph; at most one default per tenant.
task is bound to one definition (RESTRICT). status_time_log is the append-only
interval ledger with at most one open row per task.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "a7c3e91f0b12"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "workflow_definition",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "is_default", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("statuses", postgresql.JSONB(), nullable=False),
        sa.Column(
            "transitions",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'[]'::jsonb"),
        ),
        sa.Column(
            "role_restrictions",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_workflow_definition_tenant_id", "workflow_definition", ["tenant_id"]
    )
    op.create_index(
        "uq_workflow_definition_tenant_default",
        "workflow_definition",
        ["tenant_id"],
        unique=True,
        postgresql_where=sa.text("is_default"),
    )

    op.create_table(
        "task",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("tenant_id", sa.String(), nullable=False),
        sa.Column("workflow_id", sa.String(), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=64), nullable=False),
        sa.Column("assignee_id", sa.String(), nullable=True),
        sa.Column("schedule", postgresql.JSONB(), nullable=True),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(
            ["workflow_id"], ["workflow_definition.id"], ondelete="RESTRICT"
        ),
    )
    op.create_index("ix_task_tenant_id", "task", ["tenant_id"])
    op.create_index("ix_task_workflow_id", "task", ["workflow_id"])
    op.create_index("ix_task_tenant_assignee", "task", ["tenant_id", "assignee_id"])
    op.create_index("ix_task_tenant_status", "task", ["tenant_id", "status"])

    op.create_table(
        "status_time_log",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("task_id", sa.String(), nullable=False),
        sa.Column("from_status", sa.String(length=64), nullable=True),
        sa.Column("to_status", sa.String(length=64), nullable=False),
        sa.Column("entered_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("exited_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("duration_seconds", sa.Integer(), nullable=True),
        sa.Column("actor_id", sa.String(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.ForeignKeyConstraint(["task_id"], ["task.id"], ondelete="CASCADE"),
    )
    op.create_index(
        "ix_status_time_log_task_entered",
        "status_time_log",
        ["task_id", "entered_at"],
    )
    op.create_index(
        "uq_status_time_log_open_per_task",
        "status_time_log",
        ["task_id"],
        unique=True,
        postgresql_where=sa.text("exited_at IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_status_time_log_open_per_task", table_name="status_time_log")
    op.drop_index("ix_status_time_log_task_entered", table_name="status_time_log")
    op.drop_table("status_time_log")
    op.drop_index("ix_task_tenant_status", table_name="task")
    op.drop_index("ix_task_tenant_assignee", table_name="task")
    op.drop_index("ix_task_workflow_id", table_name="task")
    op.drop_index("ix_task_tenant_id", table_name="task")
    op.drop_table("task")
    op.drop_index("uq_workflow_definition_tenant_default", table_name="workflow_definition")
    op.drop_index("ix_workflow_definition_tenant_id", table_name="workflow_definition")
    op.drop_table("workflow_definition")
