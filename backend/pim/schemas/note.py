"""
PIM Backend — Note Request/Response Schemas
============================================

What:  API contract for /notes.
How:   Create requires both fields; update accepts any subset, and only the
       keys actually sent are applied (model_dump(exclude_unset=True)).
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from pim.schemas.common import APIModel, reject_null


class NoteCreate(APIModel):
    """Body of POST /notes."""
    title: str = Field(min_length=1, max_length=255, description="Note title")
    content: str = Field(min_length=1, description="Note body")


class NoteUpdate(APIModel):
    """Body of PUT /notes/{id}; omitted fields keep their stored value."""
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)

    @field_validator("title", "content")
    @classmethod
    def not_null(cls, v, info):
        return reject_null(v, info.field_name)


class NoteResponse(APIModel):
    """Full representation of a note, as returned by every /notes endpoint."""
    id: uuid.UUID = Field(description="Unique note identifier (UUID)")
    user_id: str = Field(description="Owner of the note")
    title: str
    content: str
    created_at: datetime = Field(description="Creation time (UTC ISO 8601)")
    updated_at: datetime = Field(description="Last modification time (UTC ISO 8601)")
