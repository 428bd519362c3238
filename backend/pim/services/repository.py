"""
PIM Backend — Owner-Scoped Repository
======================================

What:  Generic CRUD over one owner-scoped table (notes, contacts or tasks).
How:   Every statement carries `WHERE user_id = :user_id`. A record owned by
       someone else is therefore indistinguishable from a missing one and
       surfaces as NotFoundError (404), never as a 403.
Who:   Composed by NoteService, ContactService and TaskService.

Contract:
    list(user_id, *criteria)          → records, newest first
    find(id, user_id)                 → record | NotFoundError
    exists(user_id, *criteria)        → bool
    create(user_id, fields)           → record with id and created_at == updated_at
    update(id, user_id, fields)       → record | NotFoundError (merge, not replace)
    apply(record, fields)             → record (merge into an already-loaded record)
    delete(id, user_id)               → None | NotFoundError

Each write commits before returning, so a route handler never answers 2xx
for a change that was not stored. SQLAlchemy failures are logged and re-raised as
DatabaseError so the client only ever sees a generic 500.
"""

import logging
import uuid
from typing import Any, Dict, Generic, List, Mapping, Optional, Type, TypeVar

from sqlalchemy import delete, desc, exists, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pim.database import advance_timestamp, utcnow
from pim.exceptions import DatabaseError, NotFoundError
from pim.models.owned import OwnedRecordMixin

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=OwnedRecordMixin)

# Never writable through create/update payloads
PROTECTED_FIELDS = frozenset({"id", "user_id", "created_at", "updated_at"})


def parse_record_id(record_id: Any) -> Optional[uuid.UUID]:
    """Returns the UUID for `record_id`, or None when it is not a valid UUID."""
    if isinstance(record_id, uuid.UUID):
        return record_id
    try:
        return uuid.UUID(str(record_id))
    except (TypeError, ValueError):
        return None


class OwnedRepository(Generic[ModelT]):
    """
    CRUD for one model class, always filtered by owner.

    Args:
        model:    ORM class using OwnedRecordMixin
        resource: singular name used in NotFoundError messages ("note")
    """

    def __init__(self, model: Type[ModelT], resource: str):
        self.model = model
        self.resource = resource

    def _owned(self, user_id: str):
        return select(self.model).where(self.model.user_id == user_id)

    def _not_found(self, record_id: Any) -> NotFoundError:
        return NotFoundError(resource=self.resource, resource_id=str(record_id))

    def _storage_error(self, operation: str, exc: Exception, **context: Any) -> DatabaseError:
        logger.error(
            "Database error during %s %s: %s",
            operation, self.resource, exc, exc_info=True,
        )
        return DatabaseError(
            message=f"Could not {operation} the {self.resource}. Please try again.",
            context={"error_type": type(exc).__name__, **context},
        )

    @staticmethod
    def _clean(fields: Mapping[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in fields.items() if k not in PROTECTED_FIELDS}

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list(self, db: AsyncSession, user_id: str, *criteria) -> List[ModelT]:
        """
        Records owned by `user_id`, newest first.

        Extra SQLAlchemy criteria (filters) are ANDed onto the owner filter.
        Ties on created_at are broken by id so the order is stable.
        """
        query = self._owned(user_id)
        if criteria:
            query = query.where(*criteria)
        query = query.order_by(desc(self.model.created_at), desc(self.model.id))
        try:
            result = await db.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._storage_error("list", e, user_id=user_id) from e

    async def find(self, db: AsyncSession, record_id: Any, user_id: str) -> ModelT:
        record_uuid = parse_record_id(record_id)
        if record_uuid is None:
            raise self._not_found(record_id)
        try:
            result = await db.execute(
                self._owned(user_id).where(self.model.id == record_uuid)
            )
            record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._storage_error("retrieve", e, record_id=str(record_id)) from e

        if record is None:
            raise self._not_found(record_id)
        return record

    async def exists(self, db: AsyncSession, user_id: str, *criteria) -> bool:
        query = select(
            exists().where(self.model.user_id == user_id, *criteria)
        )
        try:
            result = await db.execute(query)
            return bool(result.scalar())
        except SQLAlchemyError as e:
            raise self._storage_error("check", e, user_id=user_id) from e

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, db: AsyncSession, user_id: str, fields: Mapping[str, Any]) -> ModelT:
        """Inserts a new record; created_at and updated_at share one timestamp."""
        now = utcnow()
        record = self.model(
            id=uuid.uuid4(),
            user_id=user_id,
            created_at=now,
            updated_at=now,
            **self._clean(fields),
        )
        try:
            db.add(record)
            await db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("create", e, user_id=user_id) from e

        logger.info("Created %s %s for user %s", self.resource, record.id, user_id)
        return record

    async def apply(self, db: AsyncSession, record: ModelT, fields: Mapping[str, Any]) -> ModelT:
        """
        Merges `fields` into a record loaded by find().

        Only keys present in `fields` change. updated_at always moves forward,
        even when the new values equal the old ones.
        """
        for name, value in self._clean(fields).items():
            setattr(record, name, value)
        record.updated_at = advance_timestamp(record.updated_at)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("update", e, record_id=str(record.id)) from e

        logger.info(
            "Updated %s %s (fields: %s)",
            self.resource, record.id, ", ".join(sorted(fields)) or "-",
        )
        return record

    async def update(
        self,
        db: AsyncSession,
        record_id: Any,
        user_id: str,
        fields: Mapping[str, Any],
    ) -> ModelT:
        record = await self.find(db, record_id, user_id)
        return await self.apply(db, record, fields)

    async def delete(self, db: AsyncSession, record_id: Any, user_id: str) -> None:
        """Deletes by id + owner; NotFoundError when no row matched."""
        record_uuid = parse_record_id(record_id)
        if record_uuid is None:
            raise self._not_found(record_id)
        try:
            result = await db.execute(
                delete(self.model).where(
                    self.model.id == record_uuid,
                    self.model.user_id == user_id,
                )
            )
        except SQLAlchemyError as e:
            raise self._storage_error("delete", e, record_id=str(record_id)) from e

        if not result.rowcount:
            raise self._not_found(record_id)
        try:
            await db.commit()
        except SQLAlchemyError as e:
            raise self._storage_error("delete", e, record_id=str(record_id)) from e

        logger.info("Deleted %s %s for user %s", self.resource, record_uuid, user_id)
