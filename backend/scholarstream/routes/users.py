"""
Scholar Stream Backend: User Routes
====================================

What:  Account endpoints: sign-in upsert, lookups, profile and role edits.
Who:   The frontend auth flow (POST /users right after sign-in, then
       GET /users/role/{email}) and the admin user-management screen.

Guards:
    GET    /users                admin
    GET    /users/role/{email}   auth
    GET    /users/{email}        auth
    POST   /users                public
    PATCH  /users/{email}        auth
    PATCH  /users/{id}/role      admin
    DELETE /users/{id}           admin

`/users/role/{email}` is declared before `/users/{email}` so "role" is
never captured as an email.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends

from scholarstream.auth import get_current_user, require_admin
from scholarstream.database import MongoStore, get_store
from scholarstream.schemas.common import DeleteOneResponse, ErrorResponse, UpdateOneResponse
from scholarstream.schemas.user import (
    ProfileUpdateRequest,
    ProfileUpdateResponse,
    RoleUpdateRequest,
    UserRoleResponse,
    UserUpsertResponse,
)
from scholarstream.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "",
    dependencies=[Depends(require_admin)],
    summary="List all users (admin)",
)
async def list_users(store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await user_service.list_users(store)


@router.get(
    "/role/{email}",
    response_model=UserRoleResponse,
    response_model_exclude_none=True,
    dependencies=[Depends(get_current_user)],
    summary="Role of a user (defaults to student)",
)
async def get_user_role(email: str, store: MongoStore = Depends(get_store)) -> UserRoleResponse:
    return await user_service.get_user_role(store, email)


@router.get(
    "/{email}",
    dependencies=[Depends(get_current_user)],
    responses={404: {"description": "No user with that email", "model": ErrorResponse}},
    summary="Get a user by email",
)
async def get_user(email: str, store: MongoStore = Depends(get_store)) -> Dict[str, Any]:
    return await user_service.get_user_by_email(store, email)


@router.post(
    "",
    response_model=UserUpsertResponse,
    response_model_exclude_none=True,
    responses={400: {"description": "Email missing", "model": ErrorResponse}},
    summary="Create the user on first sign-in, refresh name/photo afterwards",
)
async def upsert_user(
    payload: Optional[Dict[str, Any]] = Body(default=None),
    store: MongoStore = Depends(get_store),
) -> UserUpsertResponse:
    return await user_service.upsert_user(store, payload)


@router.patch(
    "/{email}",
    response_model=ProfileUpdateResponse,
    dependencies=[Depends(get_current_user)],
    summary="Update display name and photo",
)
async def update_profile(
    email: str,
    body: ProfileUpdateRequest,
    store: MongoStore = Depends(get_store),
) -> ProfileUpdateResponse:
    return await user_service.update_profile(
        store,
        email,
        display_name=body.displayName,
        photo_url=body.photoURL,
    )


@router.patch(
    "/{user_id}/role",
    response_model=UpdateOneResponse,
    dependencies=[Depends(require_admin)],
    summary="Change a user's role (admin)",
)
async def update_role(
    user_id: str,
    body: RoleUpdateRequest,
    store: MongoStore = Depends(get_store),
) -> UpdateOneResponse:
    return await user_service.update_role(store, user_id, body.role)


@router.delete(
    "/{user_id}",
    response_model=DeleteOneResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a user (admin)",
)
async def delete_user(user_id: str, store: MongoStore = Depends(get_store)) -> DeleteOneResponse:
    return await user_service.delete_user(store, user_id)
