"""
PIM Backend — Task Request/Response Schemas
============================================

What:  API contract for /tasks.
How:   status and priority are Literal types, so values outside the allowed
       set are rejected with 400 before reaching the service. completedAt is
       response-only; TaskService derives it from status.

Dates:
    dueDate accepts ISO 8601. A value without an offset is taken as UTC.
"""

import uuid
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import Field, field_validator

from pim.schemas.common import APIModel, reject_null
from pim.services.validation import blank_to_none

TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]
TaskPriority = Literal["low", "medium", "high", "urgent"]


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TaskCreate(APIModel):
    """Body of POST /tasks. status defaults to pending, priority to medium."""
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: TaskStatus = "pending"
    priority: TaskPriority = "medium"
    due_date: Optional[datetime] = None

    @field_validator("description")
    @classmethod
    def empty_description(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class TaskUpdate(APIModel):
    """
    Body of PUT /tasks/{id}.

    description and dueDate may be cleared with null; title, status and
    priority may only be omitted or replaced.
    """
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    due_date: Optional[datetime] = None

    @field_validator("title", "status", "priority")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info.field_name)

    @field_validator("description")
    @classmethod
    def empty_description(cls, v: Optional[str]) -> Optional[str]:
        return blank_to_none(v)

    @field_validator("due_date")
    @classmethod
    def due_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class TaskResponse(APIModel):
    id: uuid.UUID
    user_id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    due_date: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
