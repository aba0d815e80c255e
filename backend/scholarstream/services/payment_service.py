"""
Scholar Stream Backend: Payment Service (Stripe Checkout)
==========================================================

What:  Creates a Stripe-hosted checkout session for an application fee and
       returns the page URL the client redirects to.
How:   Builds a one-line-item payload (amount converted to cents, USD) and
       calls `stripe.checkout.Session.create`. The SDK call is blocking, so
       it runs in Starlette's threadpool.
Who:   Called by POST /create-checkout-session.

Redirect URLs:
    success → {CLIENT_URL}/payment-success?session_id={CHECKOUT_SESSION_ID}&application_id=<id>
    cancel  → {CLIENT_URL}/payment-failed?application_id=<id>

    {CHECKOUT_SESSION_ID} is a literal template that Stripe substitutes.

Payment status on the application is not updated here; the frontend does it
after the success redirect.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional

import stripe
from starlette.concurrency import run_in_threadpool

from scholarstream.config import settings
from scholarstream.exceptions import PaymentProviderError
from scholarstream.schemas.checkout import CheckoutSessionRequest, CheckoutSessionResponse

logger = logging.getLogger(__name__)

CHECKOUT_CURRENCY = "usd"


def to_minor_units(amount: float) -> int:
    """
    Dollars → cents, rounding half up (49.99 → 4999, 0.125 → 13).

    Goes through Decimal(str(amount)) so 49.99 is not read as 49.98999...
    """
    cents = Decimal(str(amount)) * 100
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def build_checkout_session_params(
    request: CheckoutSessionRequest,
    client_url: str,
    image_url: str,
) -> Dict[str, Any]:
    """
    Keyword arguments for `stripe.checkout.Session.create`.

    Pure function: no I/O, so the payload can be asserted on directly.
    """
    application_id = request.applicationId
    return {
        "payment_method_types": ["card"],
        "line_items": [
            {
                "price_data": {
                    "currency": CHECKOUT_CURRENCY,
                    "product_data": {
                        "name": f"{request.scholarshipName} - {request.universityName}",
                        "description": f"{request.degree} Degree Application",
                        "images": [image_url],
                    },
                    "unit_amount": to_minor_units(request.totalAmount),
                },
                "quantity": 1,
            }
        ],
        "mode": "payment",
        "success_url": (
            f"{client_url}/payment-success"
            f"?session_id={{CHECKOUT_SESSION_ID}}&application_id={application_id}"
        ),
        "cancel_url": f"{client_url}/payment-failed?application_id={application_id}",
        "customer_email": request.customer.email,
        "metadata": {
            "applicationId": application_id,
            "scholarshipName": request.scholarshipName,
            "universityName": request.universityName,
            "customerName": request.customer.name,
            "customerEmail": request.customer.email,
        },
    }


class PaymentService:
    """
    Thin wrapper around the Stripe SDK.

    The API key is passed per call; the `stripe` module-level key is never set.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        client_url: Optional[str] = None,
        image_url: Optional[str] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.stripe_secret_key
        self.client_url = client_url if client_url is not None else settings.client_url
        self.image_url = image_url if image_url is not None else settings.checkout_image_url

    async def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResponse:
        """
        Create the hosted checkout session.

        Raises:
            PaymentProviderError: Stripe rejected the request or could not be
                reached; the message is Stripe's own error text (→ 500)
        """
        params = build_checkout_session_params(request, self.client_url, self.image_url)

        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                api_key=self.api_key,
                **params,
            )
        except stripe.StripeError as e:
            logger.error(
                "Stripe error for application %s: %s",
                request.applicationId,
                str(e),
            )
            raise PaymentProviderError(
                message=e.user_message or str(e),
                context={"application_id": request.applicationId, "error_type": type(e).__name__},
            )
        except Exception as e:
            logger.error(
                "Unexpected checkout error for application %s: %s",
                request.applicationId,
                str(e),
                exc_info=True,
            )
            raise PaymentProviderError(
                message=str(e),
                context={"application_id": request.applicationId, "error_type": type(e).__name__},
            )

        logger.info(
            "Checkout session %s created for application %s (%d %s)",
            session.id,
            request.applicationId,
            params["line_items"][0]["price_data"]["unit_amount"],
            CHECKOUT_CURRENCY,
        )
        return CheckoutSessionResponse(url=session.url)


payment_service = PaymentService()
