"""
PIM Backend — Notes Route Handlers
===================================

What:  CRUD endpoints for /notes.
How:   Authenticate (get_current_user) → validate body (Pydantic) →
       delegate to NoteService → return JSON with the right status code.

    GET    /notes          → 200 list, newest first (X-Total-Count header)
    GET    /notes/{id}     → 200 | 404
    POST   /notes          → 201
    PUT    /notes/{id}     → 200 | 404
    DELETE /notes/{id}     → 204 | 404
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from pim.database import get_db_session
from pim.schemas.common import ErrorResponse
from pim.schemas.note import NoteCreate, NoteResponse, NoteUpdate
from pim.services.auth import Identity, get_current_user
from pim.services.note_service import note_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/notes",
    tags=["Notes"],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)

NOT_FOUND = {404: {"description": "Note not found", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[NoteResponse],
    summary="List the caller's notes",
)
async def list_notes(
    response: Response,
    search: Optional[str] = Query(
        default=None,
        description="Case-insensitive text matched against title and content",
    ),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[NoteResponse]:
    notes = await note_service.list_notes(db, identity.user_id, search=search)
    response.headers["X-Total-Count"] = str(len(notes))
    return notes


@router.get(
    "/{note_id}",
    response_model=NoteResponse,
    responses=NOT_FOUND,
    summary="Get a single note",
)
async def get_note(
    note_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.get_note(db, note_id, identity.user_id)


@router.post(
    "",
    response_model=NoteResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a note",
)
async def create_note(
    payload: NoteCreate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.create_note(db, identity.user_id, payload)


@router.put(
    "/{note_id}",
    response_model=NoteResponse,
    responses=NOT_FOUND,
    summary="Update some or all fields of a note",
)
async def update_note(
    note_id: str,
    payload: NoteUpdate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> NoteResponse:
    return await note_service.update_note(db, note_id, identity.user_id, payload)


@router.delete(
    "/{note_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await note_service.delete_note(db, note_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
