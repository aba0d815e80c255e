"""
Scholar Stream Backend: Review Routes
======================================

What:  Review listings and edits, plus the review submission that hangs off
       an application (PATCH /application/{id}/review).
Guards: every route requires a valid bearer token.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from scholarstream.auth import get_current_user
from scholarstream.database import MongoStore, get_store
from scholarstream.schemas.common import DeleteOneResponse, ErrorResponse, UpdateOneResponse
from scholarstream.schemas.review import ReviewSubmitRequest, ReviewSubmitResponse, ReviewUpdateRequest
from scholarstream.services.review_service import review_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Reviews"], dependencies=[Depends(get_current_user)])


@router.get("/reviews", summary="All reviews, newest first")
async def list_reviews(store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await review_service.list_reviews(store)


@router.get("/reviews/scholarship/{scholarship_id}", summary="Reviews of a scholarship")
async def reviews_by_scholarship(
    scholarship_id: str, store: MongoStore = Depends(get_store)
) -> List[Dict[str, Any]]:
    return await review_service.list_by_scholarship(store, scholarship_id)


@router.get("/reviews/user/{email}", summary="Reviews written by a user")
async def reviews_by_user(email: str, store: MongoStore = Depends(get_store)) -> List[Dict[str, Any]]:
    return await review_service.list_by_user(store, email)


@router.patch(
    "/application/{application_id}/review",
    response_model=ReviewSubmitResponse,
    responses={
        400: {"description": "Malformed id or rating", "model": ErrorResponse},
        404: {"description": "Application or scholarship not found", "model": ErrorResponse},
    },
    summary="Submit or replace the applicant's review for the application's scholarship",
)
async def submit_review(
    application_id: str,
    body: ReviewSubmitRequest,
    store: MongoStore = Depends(get_store),
) -> ReviewSubmitResponse:
    return await review_service.submit_for_application(
        store, application_id, body.rating, body.comment
    )


@router.patch("/reviews/{review_id}", response_model=UpdateOneResponse, summary="Edit a review")
async def update_review(
    review_id: str,
    body: ReviewUpdateRequest,
    store: MongoStore = Depends(get_store),
) -> UpdateOneResponse:
    return await review_service.update_review(store, review_id, body.reviewComment, body.ratingPoint)


@router.delete("/reviews/{review_id}", response_model=DeleteOneResponse, summary="Delete a review")
async def delete_review(review_id: str, store: MongoStore = Depends(get_store)) -> DeleteOneResponse:
    return await review_service.delete_review(store, review_id)
