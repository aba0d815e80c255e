"""
Scholar Stream Backend: Checkout Route
=======================================

What:  POST /create-checkout-session → `{"url": <Stripe checkout page>}`.
Who:   The frontend's "Pay application fee" button. Public: no token needed.
"""

import logging

from fastapi import APIRouter

from scholarstream.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResponse
from scholarstream.schemas.common import ErrorResponse
from scholarstream.services.payment_service import payment_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Payments"])


@router.post(
    "/create-checkout-session",
    response_model=CheckoutSessionResponse,
    responses={500: {"description": "Payment provider error", "model": ErrorResponse}},
    summary="Create a hosted checkout session for an application fee",
)
async def create_checkout_session(body: CheckoutSessionRequest) -> CheckoutSessionResponse:
    return await payment_service.create_checkout_session(body)
