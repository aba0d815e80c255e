"""
Scholar Stream Backend: User Service
=====================================

What:  Business logic for platform accounts: sign-in upsert, lookups,
       profile edits, role changes, deletion.
How:   One or two `users` collection calls per operation. Emails are
       lowercased before every lookup keyed on them.
Who:   Called by the /users route handlers.

Sign-in Upsert (POST /users):
    1. Lowercase the email
    2. find_one by email
    3. Found     → $set name, photoURL, updatedAt (role is never touched)
       Not found → insert the body with role defaulting to "student"

    The look-up-then-write is not atomic; two concurrent first sign-ins for
    the same email can both insert.
"""

import logging
from typing import Any, Dict, List, Optional

from scholarstream.auth import ROLE_STUDENT
from scholarstream.database import (
    MongoStore,
    serialize_document,
    serialize_documents,
    to_object_id,
    translate_store_errors,
    utc_timestamp,
)
from scholarstream.exceptions import NotFoundError, ValidationError
from scholarstream.schemas.common import DeleteOneResponse, UpdateOneResponse
from scholarstream.schemas.user import (
    ProfileUpdateResponse,
    UserRoleResponse,
    UserUpsertResponse,
)

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.lower()


class UserService:
    """
    Stateless user operations. Every method receives the store explicitly.
    """

    async def list_users(self, store: MongoStore) -> List[Dict[str, Any]]:
        with translate_store_errors("Failed to fetch users"):
            users = await store.users.find().to_list()
        return serialize_documents(users)

    async def get_user_by_email(self, store: MongoStore, email: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: no user with that (lowercased) email (→ 404)
        """
        with translate_store_errors("Failed to fetch user", email=email):
            user = await store.users.find_one({"email": normalize_email(email)})
            if user is None:
                raise NotFoundError(resource="user", message="User not found")
        return serialize_document(user)

    async def get_user_role(self, store: MongoStore, email: str) -> UserRoleResponse:
        """
        Look up the role for an email. Unknown emails are students.

        The fallback is a plain default, not an error: the frontend calls this
        right after sign-in, possibly before POST /users has landed.
        """
        with translate_store_errors("Failed to fetch user role", email=email):
            user = await store.users.find_one(
                {"email": normalize_email(email)},
                projection={"role": 1, "name": 1, "photoURL": 1},
            )

        if user is None:
            return UserRoleResponse(role=ROLE_STUDENT)
        return UserRoleResponse(
            role=user.get("role") or ROLE_STUDENT,
            name=user.get("name"),
            photoURL=user.get("photoURL"),
        )

    async def upsert_user(self, store: MongoStore, payload: Optional[Dict[str, Any]]) -> UserUpsertResponse:
        """
        Create the user on first sign-in, refresh name/photo afterwards.

        Raises:
            ValidationError: body missing or without an email (→ 400)
        """
        if not payload or not payload.get("email"):
            raise ValidationError(message="Email is required", field="email")

        email = normalize_email(str(payload["email"]))

        with translate_store_errors("Failed to save user", email=email):
            existing = await store.users.find_one({"email": email})

            if existing is not None:
                result = await store.users.update_one(
                    {"email": email},
                    {
                        "$set": {
                            "name": payload.get("name"),
                            "photoURL": payload.get("photoURL"),
                            "updatedAt": utc_timestamp(),
                        }
                    },
                )
                logger.info("User %s updated on sign-in", email)
                return UserUpsertResponse(message="User updated", acknowledged=result.acknowledged)

            new_user = {
                **payload,
                "email": email,
                "role": payload.get("role") or ROLE_STUDENT,
                "createdAt": utc_timestamp(),
            }
            result = await store.users.insert_one(new_user)
            logger.info("User %s created with role=%s", email, new_user["role"])
            return UserUpsertResponse(message="User created", insertedId=str(result.inserted_id))

    async def update_profile(
        self,
        store: MongoStore,
        email: str,
        display_name: Optional[str] = None,
        photo_url: Optional[str] = None,
    ) -> ProfileUpdateResponse:
        update_fields: Dict[str, Any] = {"updatedAt": utc_timestamp()}
        if display_name:
            update_fields["name"] = display_name
        if photo_url:
            update_fields["photoURL"] = photo_url

        with translate_store_errors("Failed to update profile", email=email):
            result = await store.users.update_one(
                {"email": normalize_email(email)},
                {"$set": update_fields},
            )
        return ProfileUpdateResponse(modifiedCount=result.modified_count)

    async def update_role(self, store: MongoStore, user_id: str, role: str) -> UpdateOneResponse:
        oid = to_object_id(user_id)
        with translate_store_errors("Failed to update user role", user_id=user_id):
            result = await store.users.update_one({"_id": oid}, {"$set": {"role": role}})
        logger.info("User %s role set to %s", user_id, role)
        return UpdateOneResponse.from_driver(result)

    async def delete_user(self, store: MongoStore, user_id: str) -> DeleteOneResponse:
        oid = to_object_id(user_id)
        with translate_store_errors("Failed to delete user", user_id=user_id):
            result = await store.users.delete_one({"_id": oid})
        return DeleteOneResponse.from_driver(result)


user_service = UserService()
