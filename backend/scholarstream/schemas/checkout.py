"""
Scholar Stream Backend: Checkout Schemas
=========================================

What:  Request/response models for POST /create-checkout-session.
"""

from pydantic import BaseModel, Field


class CheckoutCustomer(BaseModel):
    name: str = Field(default="")
    email: str


class CheckoutSessionRequest(BaseModel):
    """
    What:  Everything needed to price and label one application fee payment.

    totalAmount is in major currency units (USD dollars); the payment
    service converts it to cents.
    """
    applicationId: str
    scholarshipName: str = Field(default="")
    universityName: str = Field(default="")
    degree: str = Field(default="")
    totalAmount: float = Field(ge=0, allow_inf_nan=False, description="Amount to charge, in dollars")
    customer: CheckoutCustomer


class CheckoutSessionResponse(BaseModel):
    """URL of the provider-hosted checkout page the client redirects to."""
    url: str
