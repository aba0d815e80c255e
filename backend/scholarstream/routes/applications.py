"""
Scholar Stream Backend: Application Routes
===========================================

What:  Student application submission and lookups, moderator status and
       feedback actions, and the admin dashboard counts.
Who:   Student dashboard, moderator "manage applications" screen, admin stats.

Route Order:
    Literal paths (/application/recent, /application/user/{email},
    /application/dashboard/status) are declared before
    /application/{application_id}; otherwise "recent" would be parsed as an id.

Guards:
    moderator:  GET /manage-application/{email},
                PATCH /application/{id}/status, PATCH /application/{id}/feedback
    admin:      GET /application/dashboard/status
    auth:       everything else

All handlers pass AccessScope.ANY: any authenticated caller reads or edits
any application.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from scholarstream.auth import AccessScope, get_current_user, require_admin, require_moderator
from scholarstream.database import MongoStore, get_store, parse_limit
from scholarstream.schemas.application import (
    DashboardStats,
    FeedbackUpdateRequest,
    FeedbackUpdateResponse,
    StatusUpdateRequest,
    StatusUpdateResponse,
)
from scholarstream.schemas.common import DeleteOneResponse, ErrorResponse, InsertOneResponse, UpdateOneResponse
from scholarstream.services.application_service import (
    DEFAULT_RECENT_LIMIT,
    MAX_RECENT_LIMIT,
    application_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])


# ── Collection & literal paths ────────────────────────────────────────────

@router.get(
    "/application",
    dependencies=[Depends(get_current_user)],
    summary="List all applications",
)
async def list_applications(store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await application_service.list_applications(store, scope=AccessScope.ANY)


@router.post(
    "/application",
    response_model=InsertOneResponse,
    dependencies=[Depends(get_current_user)],
    summary="Submit an application",
)
async def create_application(
    payload: Dict[str, Any] = Body(...),
    store: MongoStore = Depends(get_store),
) -> InsertOneResponse:
    return await application_service.create_application(store, payload)


@router.get(
    "/application/recent",
    dependencies=[Depends(get_current_user)],
    summary="Most recent applications of a user",
)
async def recent_applications(
    email: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(
        default=None,
        description=f"Default {DEFAULT_RECENT_LIMIT}, at most {MAX_RECENT_LIMIT}",
    ),
    store: MongoStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    return await application_service.recent_for_user(
        store,
        email,
        parse_limit(limit, DEFAULT_RECENT_LIMIT, cap=MAX_RECENT_LIMIT),
    )


@router.get(
    "/application/user/{email}",
    dependencies=[Depends(get_current_user)],
    summary="Applications submitted by a user",
)
async def applications_by_user(email: str, store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await application_service.list_by_user(store, email)


@router.get(
    "/application/dashboard/status",
    response_model=DashboardStats,
    dependencies=[Depends(require_admin)],
    summary="Application counts per status (admin)",
)
async def dashboard_status(
    email: Optional[str] = Query(default=None),
    store: MongoStore = Depends(get_store),
) -> DashboardStats:
    return await application_service.dashboard_stats(store, email)


@router.get(
    "/my-application",
    dependencies=[Depends(get_current_user)],
    summary="Applications visible to the caller",
)
async def my_applications(store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await application_service.list_applications(store, scope=AccessScope.ANY)


@router.get(
    "/manage-application/{email}",
    dependencies=[Depends(require_moderator)],
    summary="Applications for moderation (moderator)",
)
async def manage_applications(email: str, store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await application_service.list_applications(store, scope=AccessScope.ANY)


# ── Single application ────────────────────────────────────────────────────

@router.get(
    "/application/{application_id}",
    dependencies=[Depends(get_current_user)],
    responses={400: {"description": "Malformed id", "model": ErrorResponse}},
    summary="Get one application (null when absent)",
)
async def get_application(
    application_id: str, store: MongoStore = Depends(get_store)
) -> Optional[Dict[str, Any]]:
    return await application_service.get_application(store, application_id)


@router.patch(
    "/application/{application_id}",
    response_model=UpdateOneResponse,
    dependencies=[Depends(get_current_user)],
    summary="Update application fields",
)
async def update_application(
    application_id: str,
    payload: Dict[str, Any] = Body(...),
    store: MongoStore = Depends(get_store),
) -> UpdateOneResponse:
    return await application_service.update_application(
        store, application_id, payload, scope=AccessScope.ANY
    )


@router.patch(
    "/application/{application_id}/status",
    response_model=StatusUpdateResponse,
    dependencies=[Depends(require_moderator)],
    summary="Set application status (moderator)",
)
async def update_status(
    application_id: str,
    body: StatusUpdateRequest,
    store: MongoStore = Depends(get_store),
) -> StatusUpdateResponse:
    return await application_service.update_status(store, application_id, body.status)


@router.patch(
    "/application/{application_id}/feedback",
    response_model=FeedbackUpdateResponse,
    dependencies=[Depends(require_moderator)],
    summary="Set moderator feedback (moderator)",
)
async def update_feedback(
    application_id: str,
    body: FeedbackUpdateRequest,
    store: MongoStore = Depends(get_store),
) -> FeedbackUpdateResponse:
    return await application_service.update_feedback(store, application_id, body.feedback)


@router.delete(
    "/application/{application_id}",
    response_model=DeleteOneResponse,
    dependencies=[Depends(get_current_user)],
    summary="Delete an application",
)
async def delete_application(
    application_id: str, store: MongoStore = Depends(get_store)
) -> DeleteOneResponse:
    return await application_service.delete_application(
        store, application_id, scope=AccessScope.ANY
    )
