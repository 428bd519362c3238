"""
PIM Backend — Contact SQLAlchemy Model
=======================================

What:  ORM model representing the `contacts` table.

Column notes:
    - email is stored trimmed and lower-cased; the per-user uniqueness check
      in ContactService compares lower(email)
    - email and phone are both nullable at the table level; the rule that at
      least one of them is present is enforced by ContactService
"""

from typing import Optional

from sqlalchemy import Index, String
from sqlalchemy.orm import Mapped, mapped_column

from pim.database import Base
from pim.models.owned import OwnedRecordMixin


class Contact(OwnedRecordMixin, Base):
    """A person the user keeps contact details for."""

    __tablename__ = "contacts"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Display name (non-empty)",
    )

    email: Mapped[Optional[str]] = mapped_column(
        String(320),
        nullable=True,
        default=None,
        comment="Lower-cased email address",
    )

    phone: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        default=None,
        comment="Phone number as entered (digits, spaces, + ( ) . -)",
    )

    __table_args__ = (
        Index("idx_contacts_user_created", "user_id", "created_at"),
        Index("idx_contacts_user_email", "user_id", "email"),
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, user_id='{self.user_id}', name='{self.name}')>"
