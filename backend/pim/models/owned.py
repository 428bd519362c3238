"""
PIM Backend — Owner-Scoped Record Columns
==========================================

What:  Columns shared by every PIM table: id, user_id, created_at, updated_at.
How:   Declarative mixin; each model inherits it next to Base and SQLAlchemy
       copies the columns into each table.

Column notes:
    - id: UUID generated in Python so the value is known before the INSERT
      (flush) and works the same on PostgreSQL and SQLite
    - user_id: opaque identifier taken from the verified token; every query
      filters on it
    - created_at / updated_at: UTC, timezone-aware; set by the repository
"""

import uuid
from datetime import datetime

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from pim.database import UTCDateTime, utcnow


class OwnedRecordMixin:
    """Identity, ownership and timestamp columns for owner-scoped records."""

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Unique identifier",
    )

    user_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Owning user; taken from the verified token",
    )

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When this record was created (UTC)",
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(timezone=True),
        nullable=False,
        default=utcnow,
        comment="When this record was last modified (UTC)",
    )
