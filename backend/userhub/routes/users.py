"""
UserHub Backend — User Route Handlers
=======================================

What:  The five CRUD endpoints of the users collection.
How:   Extracts path/query/body data, delegates to UserService, wraps the
       result in the response envelope.
Who:   Called by the management UI (or any HTTP client).

Route Inventory:
    GET    /users          list with optional search / sort / order
    GET    /users/{id}     single user
    POST   /users          create (201)
    PUT    /users/{id}     full replacement
    DELETE /users/{id}     hard delete

Errors raised by the service (NotFoundError, ConflictError, DatabaseError)
and body validation failures are turned into envelopes by the global
exception handlers in main.py.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from userhub.database import get_db_session
from userhub.responses import envelope_response
from userhub.schemas.user import (
    EmptyEnvelope,
    UserCreate,
    UserEnvelope,
    UserListEnvelope,
    UserUpdate,
)
from userhub.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])

_ERRORS = {
    404: {"description": "User not found", "model": EmptyEnvelope},
    500: {"description": "Server error", "model": EmptyEnvelope},
}


@router.get(
    "/users",
    response_model=UserListEnvelope,
    responses={500: _ERRORS[500]},
    summary="List users with optional search and sorting",
)
async def list_users(
    search: Optional[str] = Query(
        default=None,
        description="Case-insensitive substring matched against name, email and role",
    ),
    sort: Optional[str] = Query(
        default=None,
        description="Sort field: name, email, role, age or timestamp (default: timestamp desc)",
    ),
    order: Optional[str] = Query(
        default=None,
        description="'desc' for descending; anything else is ascending",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """
    Returns every matching user; an empty match is a successful empty list.

    Example:
        GET /users?search=alice&sort=age&order=desc
    """
    users = await user_service.list_users(db, search=search, sort=sort, order=order)
    return envelope_response(200, "Users fetched successfully", users)


@router.get(
    "/users/{user_id}",
    response_model=UserEnvelope,
    responses=_ERRORS,
    summary="Get a single user by id",
)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    # user_id stays a string: a malformed id is a 404, not a 422
    user = await user_service.get_user(db, user_id)
    return envelope_response(200, "User fetched successfully", user)


@router.post(
    "/users",
    status_code=201,
    response_model=UserEnvelope,
    responses={
        400: {"description": "Invalid request body", "model": EmptyEnvelope},
        409: {"description": "Email already in use", "model": EmptyEnvelope},
        500: _ERRORS[500],
    },
    summary="Create a user",
)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """
    Creates a user. The store assigns id and timestamp; age is derived.
    id, age and timestamp in the body are ignored.
    """
    user = await user_service.create_user(db, payload)
    return envelope_response(201, "User created successfully", user)


@router.put(
    "/users/{user_id}",
    response_model=UserEnvelope,
    responses={
        400: {"description": "Invalid request body", "model": EmptyEnvelope},
        409: {"description": "Email already in use", "model": EmptyEnvelope},
        **_ERRORS,
    },
    summary="Replace a user's fields",
)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    """Overwrites name, email, role and birth; returns the re-read record."""
    user = await user_service.update_user(db, user_id, payload)
    return envelope_response(200, "User updated successfully", user)


@router.delete(
    "/users/{user_id}",
    response_model=EmptyEnvelope,
    responses=_ERRORS,
    summary="Delete a user",
)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> JSONResponse:
    await user_service.delete_user(db, user_id)
    return envelope_response(200, "User deleted successfully")
