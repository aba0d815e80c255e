"""
Scholar Stream Backend: User Schemas
=====================================

What:  Request/response models for the /users endpoints.

User documents themselves are returned as plain serialized dicts: the
collection holds whatever the sign-in flow posted, so there is no fixed
document schema to validate against.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

Role = Literal["student", "moderator", "admin"]


class UserRoleResponse(BaseModel):
    """Role lookup result. `role` falls back to "student" for unknown emails."""
    role: str = Field(description="student, moderator or admin")
    name: Optional[str] = None
    photoURL: Optional[str] = None


class UserUpsertResponse(BaseModel):
    """
    Result of POST /users.

    Existing user:  {"message": "User updated", "acknowledged": true}
    New user:       {"message": "User created", "insertedId": "..."}
    """
    message: str
    acknowledged: Optional[bool] = None
    insertedId: Optional[str] = None


class ProfileUpdateRequest(BaseModel):
    """Body of PATCH /users/{email}. Empty values leave the field untouched."""
    displayName: Optional[str] = None
    photoURL: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    message: str = "Profile updated"
    modifiedCount: int = 0


class RoleUpdateRequest(BaseModel):
    """Body of PATCH /users/{id}/role."""
    role: Role
