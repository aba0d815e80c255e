"""
Scholar Stream Backend: Review Schemas
=======================================

What:  Request/response models for review submission and direct review edits.
"""

from typing import Optional, Union

from pydantic import BaseModel

from scholarstream.schemas.common import InsertOneResponse, UpdateOneResponse


class ReviewSubmitRequest(BaseModel):
    """
    Body of PATCH /application/{id}/review.

    `rating` arrives as a number or numeric string and is coerced to int
    by the review service; `comment` is trimmed before storage.
    """
    rating: Union[int, float, str]
    comment: str


class ReviewSubmitResponse(BaseModel):
    """`result` is the insert result for a first review, the update result otherwise."""
    success: bool = True
    result: Union[InsertOneResponse, UpdateOneResponse]


class ReviewUpdateRequest(BaseModel):
    """Body of PATCH /reviews/{id}."""
    reviewComment: Optional[str] = None
    ratingPoint: Optional[int] = None
