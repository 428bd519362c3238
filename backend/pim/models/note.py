"""
PIM Backend — Note SQLAlchemy Model
====================================

What:  ORM model representing the `notes` table.
Who:   Used by NoteService (through OwnedRepository) and by Alembic.

Index on (user_id, created_at):
    Serves the list query "this user's notes, newest first"; PostgreSQL
    scans the index backwards for the DESC order.
"""

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pim.database import Base
from pim.models.owned import OwnedRecordMixin


class Note(OwnedRecordMixin, Base):
    """
    A free-text note with a title.

    Lifecycle:
        1. Created by POST /notes
        2. Title and/or content replaced by PUT /notes/{id}
        3. Removed by DELETE /notes/{id} (hard delete)
    """

    __tablename__ = "notes"

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Short note title (non-empty)",
    )

    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Note body (non-empty)",
    )

    __table_args__ = (
        Index("idx_notes_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, user_id='{self.user_id}', title='{self.title}')>"
