"""
PIM Backend — Task SQLAlchemy Model
====================================

What:  ORM model representing the `tasks` table, plus the allowed values for
       status and priority.

Status lifecycle:
    pending ⇄ in-progress → completed (completed_at set)
    any status → cancelled
    completed → anything else (completed_at cleared)

    completed_at is non-null exactly when status == 'completed'. TaskService
    maintains the pairing; clients cannot write completed_at directly.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from pim.database import Base, UTCDateTime
from pim.models.owned import OwnedRecordMixin

TASK_STATUSES = ("pending", "in-progress", "completed", "cancelled")
TASK_PRIORITIES = ("low", "medium", "high", "urgent")

STATUS_COMPLETED = "completed"
DEFAULT_STATUS = "pending"
DEFAULT_PRIORITY = "medium"


def _in_list(column: str, values) -> str:
    quoted = ", ".join(f"'{v}'" for v in values)
    return f"{column} IN ({quoted})"


class Task(OwnedRecordMixin, Base):
    """A to-do item with status, priority and an optional due date."""

    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Task title (non-empty)",
    )

    description: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_STATUS,
        server_default=text(f"'{DEFAULT_STATUS}'"),
        comment="pending, in-progress, completed, cancelled",
    )

    priority: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_PRIORITY,
        server_default=text(f"'{DEFAULT_PRIORITY}'"),
        comment="low, medium, high, urgent",
    )

    due_date: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=True,
        default=None,
    )

    completed_at: Mapped[Optional[datetime]] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Set when status becomes 'completed', cleared when it leaves it",
    )

    __table_args__ = (
        CheckConstraint(_in_list("status", TASK_STATUSES), name="ck_tasks_status"),
        CheckConstraint(_in_list("priority", TASK_PRIORITIES), name="ck_tasks_priority"),
        Index("idx_tasks_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Task(id={self.id}, user_id='{self.user_id}', "
            f"status='{self.status}', priority='{self.priority}')>"
        )
