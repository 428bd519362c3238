"""
PIM Backend — Contact Service
==============================

What:  Business logic for /contacts on top of OwnedRepository.

Rules enforced here (format checks live in the schemas):
    1. A contact needs at least one of email or phone. For updates the rule
       is checked against the merged record, so clearing the email is fine
       as long as a phone remains.
    2. An email may appear only once among one user's contacts
       (case-insensitive); a second one is a ConflictError (409).
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.ext.asyncio import AsyncSession

from pim.exceptions import ConflictError, ValidationError
from pim.models.contact import Contact
from pim.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from pim.services.repository import OwnedRepository

logger = logging.getLogger(__name__)


class ContactService:

    def __init__(self):
        self.repository = OwnedRepository(Contact, "contact")

    @staticmethod
    def _require_channel(email: Optional[str], phone: Optional[str]) -> None:
        if not email and not phone:
            raise ValidationError(
                message="A contact needs an email address or a phone number",
                context={"fields": ["email", "phone"]},
            )

    async def _ensure_email_available(
        self,
        db: AsyncSession,
        user_id: str,
        email: Optional[str],
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        if not email:
            return
        criteria = [func.lower(Contact.email) == email.lower()]
        if exclude_id is not None:
            criteria.append(Contact.id != exclude_id)
        if await self.repository.exists(db, user_id, *criteria):
            logger.info("Rejected duplicate contact email for user %s", user_id)
            raise ConflictError(
                message="Contact with this email already exists",
                field="email",
            )

    async def list_contacts(
        self,
        db: AsyncSession,
        user_id: str,
        search: Optional[str] = None,
    ) -> List[ContactResponse]:
        """
        Args:
            search: case-insensitive substring matched against name, email, phone
        """
        criteria = []
        if search:
            criteria.append(
                or_(
                    Contact.name.icontains(search, autoescape=True),
                    Contact.email.icontains(search, autoescape=True),
                    Contact.phone.icontains(search, autoescape=True),
                )
            )
        contacts = await self.repository.list(db, user_id, *criteria)
        return [ContactResponse.model_validate(c) for c in contacts]

    async def get_contact(self, db: AsyncSession, contact_id: str, user_id: str) -> ContactResponse:
        contact = await self.repository.find(db, contact_id, user_id)
        return ContactResponse.model_validate(contact)

    async def create_contact(
        self, db: AsyncSession, user_id: str, payload: ContactCreate
    ) -> ContactResponse:
        fields = payload.model_dump()
        self._require_channel(fields["email"], fields["phone"])
        await self._ensure_email_available(db, user_id, fields["email"])
        contact = await self.repository.create(db, user_id, fields)
        return ContactResponse.model_validate(contact)

    async def update_contact(
        self,
        db: AsyncSession,
        contact_id: str,
        user_id: str,
        payload: ContactUpdate,
    ) -> ContactResponse:
        fields: Dict[str, Any] = payload.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError(message="No valid fields to update")

        contact = await self.repository.find(db, contact_id, user_id)

        email = fields.get("email", contact.email)
        phone = fields.get("phone", contact.phone)
        self._require_channel(email, phone)
        if "email" in fields and email and email != contact.email:
            await self._ensure_email_available(db, user_id, email, exclude_id=contact.id)

        contact = await self.repository.apply(db, contact, fields)
        return ContactResponse.model_validate(contact)

    async def delete_contact(self, db: AsyncSession, contact_id: str, user_id: str) -> None:
        await self.repository.delete(db, contact_id, user_id)


contact_service = ContactService()
