"""
Scholar Stream Backend: Application Schemas
============================================

What:  Request/response models for the /application endpoints.

Application bodies on create and generic update are passed through to the
store as-is; only the moderator actions and the dashboard have fixed shapes.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field

from scholarstream.schemas.common import UpdateOneResponse

ApplicationStatus = Literal["pending", "processing", "completed", "rejected"]

APPLICATION_STATUSES = ("pending", "processing", "completed", "rejected")
DEFAULT_APPLICATION_STATUS = "pending"
DEFAULT_PAYMENT_STATUS = "unpaid"


class StatusUpdateRequest(BaseModel):
    """Body of PATCH /application/{id}/status."""
    status: ApplicationStatus


class StatusUpdateResponse(BaseModel):
    success: bool = True
    modifiedCount: int = 0


class FeedbackUpdateRequest(BaseModel):
    """Body of PATCH /application/{id}/feedback."""
    feedback: Optional[str] = None


class FeedbackUpdateResponse(BaseModel):
    success: bool = True
    result: UpdateOneResponse


class DashboardStats(BaseModel):
    """Per-status application counts for GET /application/dashboard/status."""
    totalApplications: int = Field(default=0)
    pending: int = Field(default=0)
    processing: int = Field(default=0)
    completed: int = Field(default=0)
    rejected: int = Field(default=0)
