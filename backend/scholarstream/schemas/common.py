"""
Scholar Stream Backend: Shared Response Schemas
================================================

What:  Pydantic models shared by every resource: driver write results,
       error envelope, health report.
How:   Write-result models mirror the JSON shape the frontend already reads
       (`insertedId`, `modifiedCount`, ...), so field names are camelCase.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Write Results
# ══════════════════════════════════════════════════════════════════════════


class InsertOneResponse(BaseModel):
    """Result of a single-document insert."""
    acknowledged: bool = Field(default=True)
    insertedId: str = Field(description="Generated ObjectId of the new document")

    @classmethod
    def from_driver(cls, result: Any) -> "InsertOneResponse":
        return cls(acknowledged=result.acknowledged, insertedId=str(result.inserted_id))


class UpdateOneResponse(BaseModel):
    """Result of a single-document update."""
    acknowledged: bool = Field(default=True)
    matchedCount: int = Field(default=0)
    modifiedCount: int = Field(default=0)
    upsertedCount: int = Field(default=0)
    upsertedId: Optional[str] = Field(default=None)

    @classmethod
    def from_driver(cls, result: Any) -> "UpdateOneResponse":
        upserted_id = result.upserted_id
        return cls(
            acknowledged=result.acknowledged,
            matchedCount=result.matched_count,
            modifiedCount=result.modified_count,
            upsertedCount=0 if upserted_id is None else 1,
            upsertedId=None if upserted_id is None else str(upserted_id),
        )


class DeleteOneResponse(BaseModel):
    """Result of a single-document delete."""
    acknowledged: bool = Field(default=True)
    deletedCount: int = Field(default=0)

    @classmethod
    def from_driver(cls, result: Any) -> "DeleteOneResponse":
        return cls(acknowledged=result.acknowledged, deletedCount=result.deleted_count)


# ══════════════════════════════════════════════════════════════════════════
# Error & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    What:  Standardized error body for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Forbidden: Admins only",
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Returned by GET /health for monitoring and container health checks."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Document store connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
