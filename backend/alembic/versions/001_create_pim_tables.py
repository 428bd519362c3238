"""Create notes, contacts and tasks tables

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Initial schema: one owner-scoped table per resource.
How:   UUID primary keys, TIMESTAMP WITH TIME ZONE, an index on
       (user_id, created_at) per table for the "newest first" list query.

Rollback: downgrade() drops all three tables (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _owned_columns():
    """id, user_id and timestamps, shared by every table."""
    return [
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
            comment="Unique identifier",
        ),
        sa.Column(
            "user_id",
            sa.String(255),
            nullable=False,
            comment="Owning user; taken from the verified token",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this record was created (UTC)",
        ),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
            comment="When this record was last modified (UTC)",
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "notes",
        *_owned_columns(),
        sa.Column("title", sa.String(255), nullable=False, comment="Short note title (non-empty)"),
        sa.Column("content", sa.Text(), nullable=False, comment="Note body (non-empty)"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_notes_user_created", "notes", ["user_id", "created_at"])

    op.create_table(
        "contacts",
        *_owned_columns(),
        sa.Column("name", sa.String(255), nullable=False, comment="Display name (non-empty)"),
        sa.Column("email", sa.String(320), nullable=True, comment="Lower-cased email address"),
        sa.Column(
            "phone",
            sa.String(32),
            nullable=True,
            comment="Phone number as entered (digits, spaces, + ( ) . -)",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_contacts_user_created", "contacts", ["user_id", "created_at"])
    op.create_index("idx_contacts_user_email", "contacts", ["user_id", "email"])

    op.create_table(
        "tasks",
        *_owned_columns(),
        sa.Column("title", sa.String(255), nullable=False, comment="Task title (non-empty)"),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column(
            "status",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'pending'"),
            comment="pending, in-progress, completed, cancelled",
        ),
        sa.Column(
            "priority",
            sa.String(20),
            nullable=False,
            server_default=sa.text("'medium'"),
            comment="low, medium, high, urgent",
        ),
        sa.Column("due_date", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column(
            "completed_at",
            sa.TIMESTAMP(timezone=True),
            nullable=True,
            comment="Set when status becomes 'completed', cleared when it leaves it",
        ),
        sa.CheckConstraint(
            "status IN ('pending', 'in-progress', 'completed', 'cancelled')",
            name="ck_tasks_status",
        ),
        sa.CheckConstraint(
            "priority IN ('low', 'medium', 'high', 'urgent')",
            name="ck_tasks_priority",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_tasks_user_created", "tasks", ["user_id", "created_at"])


def downgrade() -> None:
    op.drop_index("idx_tasks_user_created", table_name="tasks")
    op.drop_table("tasks")
    op.drop_index("idx_contacts_user_email", table_name="contacts")
    op.drop_index("idx_contacts_user_created", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("idx_notes_user_created", table_name="notes")
    op.drop_table("notes")
