"""
PIM Backend — Task Service
===========================

What:  Business logic for /tasks on top of OwnedRepository.

Status / completedAt coupling:
    create with status=completed           → completed_at = now
    update into completed (from elsewhere) → completed_at = now
    update completed → completed           → completed_at unchanged
    update to any other status             → completed_at = None
    update without a status                → completed_at unchanged
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pim.database import utcnow
from pim.exceptions import ValidationError
from pim.models.task import STATUS_COMPLETED, Task
from pim.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from pim.services.repository import OwnedRepository

logger = logging.getLogger(__name__)


def completion_fields(new_status: str, previous_status: Optional[str] = None) -> Dict[str, Any]:
    """
    Returns the completed_at change implied by moving to `new_status`.

    An empty dict means "leave completed_at alone".
    """
    if new_status == STATUS_COMPLETED:
        if previous_status == STATUS_COMPLETED:
            return {}
        return {"completed_at": utcnow()}
    return {"completed_at": None}


class TaskService:

    def __init__(self):
        self.repository = OwnedRepository(Task, "task")

    async def list_tasks(
        self,
        db: AsyncSession,
        user_id: str,
        status: Optional[str] = None,
        priority: Optional[str] = None,
    ) -> List[TaskResponse]:
        criteria = []
        if status:
            criteria.append(Task.status == status)
        if priority:
            criteria.append(Task.priority == priority)
        tasks = await self.repository.list(db, user_id, *criteria)
        return [TaskResponse.model_validate(t) for t in tasks]

    async def get_task(self, db: AsyncSession, task_id: str, user_id: str) -> TaskResponse:
        task = await self.repository.find(db, task_id, user_id)
        return TaskResponse.model_validate(task)

    async def create_task(
        self, db: AsyncSession, user_id: str, payload: TaskCreate
    ) -> TaskResponse:
        fields = payload.model_dump()
        fields.update(completion_fields(fields["status"]))
        task = await self.repository.create(db, user_id, fields)
        return TaskResponse.model_validate(task)

    async def update_task(
        self,
        db: AsyncSession,
        task_id: str,
        user_id: str,
        payload: TaskUpdate,
    ) -> TaskResponse:
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            raise ValidationError(message="No valid fields to update")

        task = await self.repository.find(db, task_id, user_id)
        if "status" in fields:
            previous = task.status
            fields.update(completion_fields(fields["status"], previous))
            if previous != fields["status"]:
                logger.info("Task %s status %s → %s", task.id, previous, fields["status"])

        task = await self.repository.apply(db, task, fields)
        return TaskResponse.model_validate(task)

    async def delete_task(self, db: AsyncSession, task_id: str, user_id: str) -> None:
        await self.repository.delete(db, task_id, user_id)


task_service = TaskService()
