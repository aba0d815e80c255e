"""
Scholar Stream Backend: Scholarship Routes
===========================================

What:  Public browsing (list, top-N cheapest, detail) and admin CRUD.
How:   Admin bodies are free-form JSON objects stored as given.

`/scholarships/top` is declared before `/scholarships/{scholarship_id}`.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Query

from scholarstream.auth import require_admin
from scholarstream.database import MongoStore, get_store, parse_limit
from scholarstream.schemas.common import DeleteOneResponse, ErrorResponse, InsertOneResponse, UpdateOneResponse
from scholarstream.services.scholarship_service import DEFAULT_TOP_LIMIT, scholarship_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/scholarships", tags=["Scholarships"])


@router.get("", summary="List all scholarships")
async def list_scholarships(store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await scholarship_service.list_scholarships(store)


@router.get("/top", summary="Cheapest scholarships by application fee")
async def top_scholarships(
    limit: Optional[str] = Query(
        default=None,
        description=f"Number of scholarships to return (default {DEFAULT_TOP_LIMIT})",
    ),
    store: MongoStore = Depends(get_store),
) -> List[Dict[str, Any]]:
    # Parsed by hand: "abc" or "0" fall back to the default instead of a 422
    return await scholarship_service.top_scholarships(store, parse_limit(limit, DEFAULT_TOP_LIMIT))


@router.get(
    "/{scholarship_id}",
    responses={400: {"description": "Malformed id", "model": ErrorResponse}},
    summary="Get one scholarship (null when absent)",
)
async def get_scholarship(
    scholarship_id: str, store: MongoStore = Depends(get_store)
) -> Optional[Dict[str, Any]]:
    return await scholarship_service.get_scholarship(store, scholarship_id)


@router.post(
    "",
    response_model=InsertOneResponse,
    dependencies=[Depends(require_admin)],
    summary="Create a scholarship (admin)",
)
async def create_scholarship(
    payload: Dict[str, Any] = Body(...),
    store: MongoStore = Depends(get_store),
) -> InsertOneResponse:
    return await scholarship_service.create_scholarship(store, payload)


@router.patch(
    "/{scholarship_id}",
    response_model=UpdateOneResponse,
    dependencies=[Depends(require_admin)],
    summary="Update a scholarship (admin)",
)
async def update_scholarship(
    scholarship_id: str,
    payload: Dict[str, Any] = Body(...),
    store: MongoStore = Depends(get_store),
) -> UpdateOneResponse:
    return await scholarship_service.update_scholarship(store, scholarship_id, payload)


@router.delete(
    "/{scholarship_id}",
    response_model=DeleteOneResponse,
    dependencies=[Depends(require_admin)],
    summary="Delete a scholarship (admin)",
)
async def delete_scholarship(
    scholarship_id: str, store: MongoStore = Depends(get_store)
) -> DeleteOneResponse:
    return await scholarship_service.delete_scholarship(store, scholarship_id)
