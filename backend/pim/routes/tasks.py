"""
PIM Backend — Tasks Route Handlers
===================================

What:  CRUD endpoints for /tasks, with optional status/priority filters on
       the list endpoint.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from pim.database import get_db_session
from pim.schemas.common import ErrorResponse
from pim.schemas.task import (
    TaskCreate,
    TaskPriority,
    TaskResponse,
    TaskStatus,
    TaskUpdate,
)
from pim.services.auth import Identity, get_current_user
from pim.services.task_service import task_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/tasks",
    tags=["Tasks"],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)

NOT_FOUND = {404: {"description": "Task not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[TaskResponse],
    summary="List the caller's tasks",
)
async def list_tasks(
    response: Response,
    status_filter: Optional[TaskStatus] = Query(default=None, alias="status"),
    priority: Optional[TaskPriority] = Query(default=None),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[TaskResponse]:
    tasks = await task_service.list_tasks(
        db, identity.user_id, status=status_filter, priority=priority
    )
    response.headers["X-Total-Count"] = str(len(tasks))
    return tasks


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    responses=NOT_FOUND,
    summary="Get a single task",
)
async def get_task(
    task_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.get_task(db, task_id, identity.user_id)


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a task",
)
async def create_task(
    payload: TaskCreate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.create_task(db, identity.user_id, payload)


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    responses=NOT_FOUND,
    summary="Update some or all fields of a task",
)
async def update_task(
    task_id: str,
    payload: TaskUpdate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> TaskResponse:
    return await task_service.update_task(db, task_id, identity.user_id, payload)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete a task",
)
async def delete_task(
    task_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await task_service.delete_task(db, task_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
