"""
Scholar Stream Backend: Scholarship Service
============================================

What:  Listing, top-N by fee, lookup and admin CRUD over `scholarships`.
How:   Request bodies from admins are stored as given; there is no
       scholarship schema beyond the fields other features read
       (scholarshipName, universityName, degree, applicationFees).
"""

import logging
from typing import Any, Dict, List, Optional

from pymongo import ASCENDING

from scholarstream.database import (
    MongoStore,
    serialize_document,
    serialize_documents,
    to_object_id,
    translate_store_errors,
)
from scholarstream.schemas.common import DeleteOneResponse, InsertOneResponse, UpdateOneResponse

logger = logging.getLogger(__name__)

DEFAULT_TOP_LIMIT = 6


class ScholarshipService:

    async def list_scholarships(self, store: MongoStore) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch scholarships"):
            docs = await store.scholarships.find().to_list()
        return serialize_documents(docs)

    async def top_scholarships(self, store: MongoStore, limit: int = DEFAULT_TOP_LIMIT) -> List[Dict[str, Any]]:
        """Cheapest `limit` scholarships, sorted by applicationFees ascending."""
        with translate_store_errors("Failed to fetch top scholarships", limit=limit):
            docs = await (
                store.scholarships.find()
                .sort("applicationFees", ASCENDING)
                .limit(limit)
                .to_list()
            )
        return serialize_documents(docs)

    async def get_scholarship(self, store: MongoStore, scholarship_id: str) -> Optional[Dict[str, Any]]:
        """Returns the document, or None when the id matches nothing."""
        oid = to_object_id(scholarship_id)
        with translate_store_errors("Failed to fetch scholarship", scholarship_id=scholarship_id):
            doc = await store.scholarships.find_one({"_id": oid})
        return serialize_document(doc)

    async def create_scholarship(self, store: MongoStore, payload: Dict[str, Any]) -> InsertOneResponse:
        with translate_store_errors("Failed to create scholarship"):
            result = await store.scholarships.insert_one(dict(payload))
        logger.info("Scholarship created: %s", result.inserted_id)
        return InsertOneResponse.from_driver(result)

    async def update_scholarship(
        self, store: MongoStore, scholarship_id: str, payload: Dict[str, Any]
    ) -> UpdateOneResponse:
        oid = to_object_id(scholarship_id)
        fields = {k: v for k, v in payload.items() if k != "_id"}
        with translate_store_errors("Failed to update scholarship", scholarship_id=scholarship_id):
            result = await store.scholarships.update_one({"_id": oid}, {"$set": fields})
        return UpdateOneResponse.from_driver(result)

    async def delete_scholarship(self, store: MongoStore, scholarship_id: str) -> DeleteOneResponse:
        oid = to_object_id(scholarship_id)
        with translate_store_errors("Failed to delete scholarship", scholarship_id=scholarship_id):
            result = await store.scholarships.delete_one({"_id": oid})
        logger.info("Scholarship %s deleted (count=%d)", scholarship_id, result.deleted_count)
        return DeleteOneResponse.from_driver(result)


scholarship_service = ScholarshipService()
