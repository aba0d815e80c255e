"""
Scholar Stream Backend: Review Service
=======================================

What:  Review listings, the submit-or-update flow tied to an application,
       and direct review edits/deletes.
Who:   Called by the /reviews routes and PATCH /application/{id}/review.

Submission Flow (PATCH /application/{id}/review):
    ┌─────────────┐   ┌─────────────┐   ┌──────────────┐   ┌──────────────┐
    │ application │──▶│ scholarship │──▶│ review upsert│──▶│ reviewed=true│
    │  find_one   │   │  find_one   │   │ (scholarship,│   │ on the       │
    │             │   │             │   │  userEmail)  │   │ application  │
    └─────────────┘   └─────────────┘   └──────────────┘   └──────────────┘

    One review per (scholarshipId, userEmail) is kept by looking up an
    existing review and updating it in place; there is no unique index.
    The review write and the application flag are separate writes: a
    failure between them leaves a stored review on an unflagged application.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, Union

from pymongo import DESCENDING

from scholarstream.database import (
    MongoStore,
    leading_int,
    serialize_documents,
    to_object_id,
    translate_store_errors,
)
from scholarstream.exceptions import NotFoundError, ValidationError
from scholarstream.schemas.common import DeleteOneResponse, InsertOneResponse, UpdateOneResponse
from scholarstream.schemas.review import ReviewSubmitResponse

logger = logging.getLogger(__name__)

ANONYMOUS_REVIEWER = "Anonymous User"


def coerce_rating(value: Union[int, float, str]) -> int:
    """
    Integer rating from a number or numeric string ("4", "4.5" → 4).

    Raises:
        ValidationError: no leading integer in the value, or a non-finite
            float such as Infinity or NaN (→ 400)
    """
    if isinstance(value, bool):
        raise ValidationError(message="Rating must be an integer", field="rating")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(message="Rating must be an integer", field="rating")
        return int(value)
    parsed = leading_int(value)
    if parsed is None:
        raise ValidationError(message="Rating must be an integer", field="rating")
    return parsed


def applicant_identity(application: Dict[str, Any]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    (email, name, photo) of the applicant.

    Application records carry either `applicantEmail`/`applicantName`/
    `applicantPhoto` or `userEmail`/`userName`/`userPhoto`; the applicant*
    fields win when both are present.
    """
    # TODO: drop this fallback once existing applications are migrated to the userEmail/userName/userPhoto fields
    email = application.get("applicantEmail") or application.get("userEmail")
    name = application.get("applicantName") or application.get("userName")
    photo = application.get("applicantPhoto") or application.get("userPhoto")
    return email, name, photo


class ReviewService:

    async def list_reviews(self, store: MongoStore) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch reviews"):
            docs = await store.reviews.find({}).sort("reviewDate", DESCENDING).to_list()
        return serialize_documents(docs)

    async def list_by_scholarship(self, store: MongoStore, scholarship_id: str) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch scholarship reviews", scholarship_id=scholarship_id):
            docs = await (
                store.reviews.find({"scholarshipId": scholarship_id})
                .sort("reviewDate", DESCENDING)
                .to_list()
            )
        return serialize_documents(docs)

    async def list_by_user(self, store: MongoStore, email: str) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch user reviews", email=email):
            docs = await (
                store.reviews.find({"userEmail": email})
                .sort("reviewDate", DESCENDING)
                .to_list()
            )
        return serialize_documents(docs)

    async def submit_for_application(
        self,
        store: MongoStore,
        application_id: str,
        rating: Union[int, float, str],
        comment: str,
    ) -> ReviewSubmitResponse:
        """
        Create or replace the caller's review for the application's scholarship,
        then mark the application reviewed.

        Raises:
            ValidationError: malformed id or rating (→ 400)
            NotFoundError: application or its scholarship no longer exists (→ 404)
            DatabaseError: any store failure (→ 500)
        """
        oid = to_object_id(application_id)
        rating_point = coerce_rating(rating)

        with translate_store_errors("Failed to submit review", application_id=application_id):
            application = await store.applications.find_one({"_id": oid})
            if application is None:
                raise NotFoundError(resource="application", resource_id=application_id)

            scholarship_id = application.get("scholarshipId")
            scholarship = await store.scholarships.find_one(
                {"_id": to_object_id(scholarship_id, field="scholarshipId")}
            )
            if scholarship is None:
                raise NotFoundError(resource="scholarship", resource_id=str(scholarship_id))

            user_email, user_name, user_photo = applicant_identity(application)

            existing = await store.reviews.find_one(
                {"scholarshipId": scholarship_id, "userEmail": user_email}
            )

            review = {
                "scholarshipId": scholarship_id,
                "scholarshipName": scholarship.get("scholarshipName"),
                "universityName": scholarship.get("universityName"),
                "userEmail": user_email,
                "userName": user_name or ANONYMOUS_REVIEWER,
                "userPhoto": user_photo or None,
                "ratingPoint": rating_point,
                "reviewComment": comment.strip(),
                "reviewDate": datetime.now(timezone.utc),
            }

            result: Union[InsertOneResponse, UpdateOneResponse]
            if existing is not None:
                raw = await store.reviews.update_one({"_id": existing["_id"]}, {"$set": review})
                result = UpdateOneResponse.from_driver(raw)
                logger.info("Review %s updated for application %s", existing["_id"], application_id)
            else:
                raw = await store.reviews.insert_one(review)
                result = InsertOneResponse.from_driver(raw)
                logger.info("Review %s created for application %s", raw.inserted_id, application_id)

            await store.applications.update_one({"_id": oid}, {"$set": {"reviewed": True}})

        return ReviewSubmitResponse(result=result)

    async def update_review(
        self,
        store: MongoStore,
        review_id: str,
        review_comment: Optional[str],
        rating_point: Optional[int],
    ) -> UpdateOneResponse:
        oid = to_object_id(review_id)
        with translate_store_errors("Failed to update review", review_id=review_id):
            result = await store.reviews.update_one(
                {"_id": oid},
                {
                    "$set": {
                        "reviewComment": review_comment,
                        "ratingPoint": rating_point,
                        "reviewDate": datetime.now(timezone.utc),
                    }
                },
            )
        return UpdateOneResponse.from_driver(result)

    async def delete_review(self, store: MongoStore, review_id: str) -> DeleteOneResponse:
        oid = to_object_id(review_id)
        with translate_store_errors("Failed to delete review", review_id=review_id):
            result = await store.reviews.delete_one({"_id": oid})
        return DeleteOneResponse.from_driver(result)


review_service = ReviewService()
