"""
PIM Backend — Contact Request/Response Schemas
===============================================

What:  API contract for /contacts.
How:   Field-level format checks (email, phone) run here; the rule that a
       contact needs at least one of email/phone is checked by ContactService
       because, for updates, it depends on the stored record.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from pim.schemas.common import APIModel, reject_null
from pim.services.validation import normalize_email, normalize_phone


class _ContactChannels(APIModel):
    """
    email / phone, shared by create and update.

    An empty string is treated like null (no value).
    """
    email: Optional[str] = Field(default=None, max_length=320)
    phone: Optional[str] = Field(default=None, max_length=32)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v)

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: Optional[str]) -> Optional[str]:
        return normalize_phone(v)


class ContactCreate(_ContactChannels):
    """Body of POST /contacts."""
    name: str = Field(min_length=1, max_length=255)


class ContactUpdate(_ContactChannels):
    """
    Body of PUT /contacts/{id}.

    Sending "email": null (or "") removes the email; omitting it keeps it.
    """
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)

    @field_validator("name")
    @classmethod
    def name_not_null(cls, v):
        return reject_null(v, "name")


class ContactResponse(APIModel):
    id: uuid.UUID
    user_id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    created_at: datetime
    updated_at: datetime
