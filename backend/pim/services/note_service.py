"""
PIM Backend — Note Service
===========================

What:  Business logic for /notes on top of OwnedRepository.
How:   Stateless; each call receives the request's AsyncSession and the
       caller's user id. Returns response schemas, raises app exceptions.
Who:   Called by the notes route handlers.
"""

import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession

from pim.exceptions import ValidationError
from pim.models.note import Note
from pim.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from pim.services.repository import OwnedRepository

logger = logging.getLogger(__name__)


class NoteService:
    """
    Responsibilities:
        - list_notes(): caller's notes, newest first, optional text search
        - get_note(): one note or NotFoundError
        - create_note() / update_note() / delete_note()
    """

    def __init__(self):
        self.repository = OwnedRepository(Note, "note")

    async def list_notes(
        self,
        db: AsyncSession,
        user_id: str,
        search: Optional[str] = None,
    ) -> List[NoteResponse]:
        """
        Args:
            search: case-insensitive substring matched against title or content
        """
        criteria = []
        if search:
            criteria.append(
                or_(
                    Note.title.icontains(search, autoescape=True),
                    Note.content.icontains(search, autoescape=True),
                )
            )
        notes = await self.repository.list(db, user_id, *criteria)
        return [NoteResponse.model_validate(note) for note in notes]

    async def get_note(self, db: AsyncSession, note_id: str, user_id: str) -> NoteResponse:
        note = await self.repository.find(db, note_id, user_id)
        return NoteResponse.model_validate(note)

    async def create_note(
        self, db: AsyncSession, user_id: str, payload: NoteCreate
    ) -> NoteResponse:
        note = await self.repository.create(db, user_id, payload.model_dump())
        return NoteResponse.model_validate(note)

    async def update_note(
        self, db: AsyncSession, note_id: str, user_id: str, payload: NoteUpdate
    ) -> NoteResponse:
        """
        Partial update: only the fields present in the request body change.

        Raises:
            ValidationError: body contained no updatable field
            NotFoundError: no such note for this user
        """
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError(message="No valid fields to update")
        note = await self.repository.update(db, note_id, user_id, fields)
        return NoteResponse.model_validate(note)

    async def delete_note(self, db: AsyncSession, note_id: str, user_id: str) -> None:
        await self.repository.delete(db, note_id, user_id)


note_service = NoteService()
