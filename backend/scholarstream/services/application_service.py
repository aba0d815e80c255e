"""
Scholar Stream Backend: Application Service
============================================

What:  Student applications: submission, lookups, moderator status/feedback
       changes, generic edits, deletion and the dashboard status counts.
How:   Single `application` collection calls, plus one `users` lookup for the
       dashboard.
Who:   Called by the /application, /my-application and /manage-application routes.

Authorization Scope:
    List, update and delete take an explicit `scope` (see AccessScope).
    AccessScope.ANY operates on every document; AccessScope.SELF adds
    `{"userEmail": caller_email}` to the filter. The routes currently pass
    ANY everywhere, so no ownership check is applied on those endpoints.

Dashboard Stats Scoping:
    The counts are scoped to `userEmail == email` only when the looked-up
    user is neither admin nor moderator. GET /application/dashboard/status
    is admin-gated, so that branch is not reachable through the route.
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING

from scholarstream.auth import ROLE_ADMIN, ROLE_MODERATOR, AccessScope
from scholarstream.database import (
    MongoStore,
    serialize_document,
    serialize_documents,
    to_object_id,
    translate_store_errors,
    utc_timestamp,
)
from scholarstream.exceptions import ValidationError
from scholarstream.schemas.application import (
    APPLICATION_STATUSES,
    DEFAULT_APPLICATION_STATUS,
    DEFAULT_PAYMENT_STATUS,
    DashboardStats,
    FeedbackUpdateResponse,
    StatusUpdateResponse,
)
from scholarstream.schemas.common import DeleteOneResponse, InsertOneResponse, UpdateOneResponse

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 5
MAX_RECENT_LIMIT = 100


def scoped_filter(
    base: Dict[str, Any],
    scope: AccessScope,
    caller_email: Optional[str],
) -> Dict[str, Any]:
    """
    Add the ownership condition for AccessScope.SELF.

    Raises:
        ValidationError: SELF scope without a caller email
    """
    if scope is AccessScope.ANY:
        return base
    if not caller_email:
        raise ValidationError(message="Caller email is required for self-scoped access")
    return {**base, "userEmail": caller_email}


def status_count_pipeline(match: Dict[str, Any]) -> List[Dict[str, Any]]:
    """$match + one $group summing a 0/1 flag per application status."""
    group: Dict[str, Any] = {"_id": None, "total": {"$sum": 1}}
    for status in APPLICATION_STATUSES:
        group[status] = {
            "$sum": {"$cond": [{"$eq": ["$applicationStatus", status]}, 1, 0]}
        }
    return [{"$match": match}, {"$group": group}]


class ApplicationService:
    """
    Stateless application operations.
    """

    async def list_applications(
        self,
        store: MongoStore,
        scope: AccessScope = AccessScope.ANY,
        caller_email: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        query = scoped_filter({}, scope, caller_email)
        with translate_store_errors("Failed to fetch applications", scope=scope.value):
            docs = await store.applications.find(query).to_list()
        return serialize_documents(docs)

    async def create_application(self, store: MongoStore, payload: Dict[str, Any]) -> InsertOneResponse:
        """
        Store a new application.

        Stamps appliedAt/createdAt, defaults applicationStatus to "pending"
        and always starts paymentStatus at "unpaid".
        """
        now = utc_timestamp()
        application = {
            **payload,
            "appliedAt": now,
            "applicationStatus": payload.get("applicationStatus") or DEFAULT_APPLICATION_STATUS,
            "paymentStatus": DEFAULT_PAYMENT_STATUS,
            "createdAt": now,
        }
        with translate_store_errors("Failed to create application"):
            result = await store.applications.insert_one(application)
        logger.info(
            "Application %s created for scholarship=%s",
            result.inserted_id,
            application.get("scholarshipId"),
        )
        return InsertOneResponse.from_driver(result)

    async def get_application(self, store: MongoStore, application_id: str) -> Optional[Dict[str, Any]]:
        """Returns the document, or None when the id matches nothing."""
        oid = to_object_id(application_id)
        with translate_store_errors("Failed to fetch application", application_id=application_id):
            doc = await store.applications.find_one({"_id": oid})
        return serialize_document(doc)

    async def list_by_user(self, store: MongoStore, email: str) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch user applications", email=email):
            docs = await store.applications.find({"userEmail": email}).to_list()
        return serialize_documents(docs)

    async def recent_for_user(
        self,
        store: MongoStore,
        email: Optional[str],
        limit: int = DEFAULT_RECENT_LIMIT,
    ) -> List[Dict[str, Any]]:
        """Newest `limit` applications for a user, never more than MAX_RECENT_LIMIT."""
        limit = min(limit, MAX_RECENT_LIMIT)
        with translate_store_errors("Failed to fetch recent activities", email=email):
            docs = await (
                store.applications.find({"userEmail": email})
                .sort("appliedAt", DESCENDING)
                .limit(limit)
                .to_list()
            )
        return serialize_documents(docs)

    async def update_application(
        self,
        store: MongoStore,
        application_id: str,
        payload: Dict[str, Any],
        scope: AccessScope = AccessScope.ANY,
        caller_email: Optional[str] = None,
    ) -> UpdateOneResponse:
        """$set the given fields as-is."""
        query = scoped_filter({"_id": to_object_id(application_id)}, scope, caller_email)
        fields = {k: v for k, v in payload.items() if k != "_id"}
        with translate_store_errors("Failed to update application", application_id=application_id):
            result = await store.applications.update_one(query, {"$set": fields})
        return UpdateOneResponse.from_driver(result)

    async def update_status(self, store: MongoStore, application_id: str, status: str) -> StatusUpdateResponse:
        oid = to_object_id(application_id)
        with translate_store_errors("Failed to update application status", application_id=application_id):
            result = await store.applications.update_one(
                {"_id": oid},
                {"$set": {"applicationStatus": status, "updatedAt": utc_timestamp()}},
            )
        logger.info("Application %s status → %s", application_id, status)
        return StatusUpdateResponse(modifiedCount=result.modified_count)

    async def update_feedback(
        self, store: MongoStore, application_id: str, feedback: Optional[str]
    ) -> FeedbackUpdateResponse:
        oid = to_object_id(application_id)
        with translate_store_errors("Failed to update application feedback", application_id=application_id):
            result = await store.applications.update_one(
                {"_id": oid},
                {"$set": {"feedback": feedback, "updatedAt": utc_timestamp()}},
            )
        return FeedbackUpdateResponse(result=UpdateOneResponse.from_driver(result))

    async def delete_application(
        self,
        store: MongoStore,
        application_id: str,
        scope: AccessScope = AccessScope.ANY,
        caller_email: Optional[str] = None,
    ) -> DeleteOneResponse:
        query = scoped_filter({"_id": to_object_id(application_id)}, scope, caller_email)
        with translate_store_errors("Failed to delete application", application_id=application_id):
            result = await store.applications.delete_one(query)
        return DeleteOneResponse.from_driver(result)

    async def dashboard_stats(self, store: MongoStore, email: Optional[str] = None) -> DashboardStats:
        """
        Total and per-status application counts.

        How:
            1. Look up `email` in users (exact match, not lowercased)
            2. Unscoped when that user is admin/moderator or no email given,
               otherwise scoped to `userEmail == email`
            3. count_documents for the total, one $group aggregation for
               the per-status counts
        """
        with translate_store_errors("Failed to fetch stats", email=email):
            user = await store.users.find_one({"email": email})
            is_admin_or_moderator = user is not None and user.get("role") in (ROLE_ADMIN, ROLE_MODERATOR)

            query: Dict[str, Any] = {}
            if not is_admin_or_moderator and email:
                query = {"userEmail": email}

            total = await store.applications.count_documents(query)
            cursor = await store.applications.aggregate(status_count_pipeline(query))
            rows = await cursor.to_list()

        counts = rows[0] if rows else {}
        return DashboardStats(
            totalApplications=total,
            pending=counts.get("pending", 0),
            processing=counts.get("processing", 0),
            completed=counts.get("completed", 0),
            rejected=counts.get("rejected", 0),
        )


application_service = ApplicationService()
