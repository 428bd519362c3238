"""
PIM Backend — Contacts Route Handlers
======================================

What:  CRUD endpoints for /contacts. Same shape as /notes, plus 409 when
       an email is already used by another of the caller's contacts.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from pim.database import get_db_session
from pim.schemas.common import ErrorResponse
from pim.schemas.contact import ContactCreate, ContactResponse, ContactUpdate
from pim.services.auth import Identity, get_current_user
from pim.services.contact_service import contact_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/contacts",
    tags=["Contacts"],
    responses={
        400: {"description": "Invalid input", "model": ErrorResponse},
        401: {"description": "Missing or invalid credentials", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
)

NOT_FOUND = {404: {"description": "Contact not found", "model": ErrorResponse}}
CONFLICT = {409: {"description": "Email already used by another contact", "model": ErrorResponse}}


@router.get(
    "",
    response_model=List[ContactResponse],
    summary="List the caller's contacts",
)
async def list_contacts(
    response: Response,
    search: Optional[str] = Query(
        default=None,
        description="Case-insensitive text matched against name, email and phone",
    ),
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ContactResponse]:
    contacts = await contact_service.list_contacts(db, identity.user_id, search=search)
    response.headers["X-Total-Count"] = str(len(contacts))
    return contacts


@router.get(
    "/{contact_id}",
    response_model=ContactResponse,
    responses=NOT_FOUND,
    summary="Get a single contact",
)
async def get_contact(
    contact_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    return await contact_service.get_contact(db, contact_id, identity.user_id)


@router.post(
    "",
    response_model=ContactResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
    summary="Create a contact",
)
async def create_contact(
    payload: ContactCreate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    return await contact_service.create_contact(db, identity.user_id, payload)


@router.put(
    "/{contact_id}",
    response_model=ContactResponse,
    responses={**NOT_FOUND, **CONFLICT},
    summary="Update some or all fields of a contact",
)
async def update_contact(
    contact_id: str,
    payload: ContactUpdate,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ContactResponse:
    return await contact_service.update_contact(db, contact_id, identity.user_id, payload)


@router.delete(
    "/{contact_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses=NOT_FOUND,
    summary="Delete a contact",
)
async def delete_contact(
    contact_id: str,
    identity: Identity = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> Response:
    await contact_service.delete_contact(db, contact_id, identity.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
