"""
Scholar Stream Backend: Payment Service Unit Tests
===================================================

What:  Checkout payload construction and Stripe error mapping.
How:   `stripe.checkout.Session.create` is patched; no network calls.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
import stripe
from pydantic import ValidationError as SchemaValidationError

from scholarstream.exceptions import PaymentProviderError
from scholarstream.schemas.checkout import CheckoutSessionRequest
from scholarstream.services.payment_service import (
    PaymentService,
    build_checkout_session_params,
    to_minor_units,
)


def _request(**overrides):
    body = {
        "applicationId": "app-123",
        "scholarshipName": "STEM Fund",
        "universityName": "State U",
        "degree": "Masters",
        "totalAmount": 49.99,
        "customer": {"name": "Sam", "email": "sam@example.com"},
    }
    body.update(overrides)
    return CheckoutSessionRequest(**body)


class TestMinorUnits:

    @pytest.mark.parametrize(
        "amount,cents",
        [(49.99, 4999), (0, 0), (10, 1000), (0.125, 13), (19.995, 2000), (1.005, 101)],
    )
    def test_rounds_half_up(self, amount, cents):
        assert to_minor_units(amount) == cents


class TestCheckoutRequestSchema:

    @pytest.mark.parametrize("amount", [float("inf"), float("nan"), -1])
    def test_rejects_unpriceable_amounts(self, amount):
        with pytest.raises(SchemaValidationError):
            _request(totalAmount=amount)


class TestCheckoutParams:

    def test_payload_shape(self):
        params = build_checkout_session_params(_request(), "http://localhost:5173", "https://img/x.png")

        item = params["line_items"][0]
        assert item["quantity"] == 1
        assert item["price_data"]["currency"] == "usd"
        assert item["price_data"]["unit_amount"] == 4999
        assert item["price_data"]["product_data"]["name"] == "STEM Fund - State U"
        assert item["price_data"]["product_data"]["description"] == "Masters Degree Application"
        assert item["price_data"]["product_data"]["images"] == ["https://img/x.png"]
        assert params["payment_method_types"] == ["card"]
        assert params["mode"] == "payment"
        assert params["customer_email"] == "sam@example.com"
        assert params["metadata"]["applicationId"] == "app-123"
        assert params["metadata"]["customerName"] == "Sam"

    def test_redirect_urls(self):
        params = build_checkout_session_params(_request(), "http://localhost:5173", "img")

        assert params["success_url"] == (
            "http://localhost:5173/payment-success"
            "?session_id={CHECKOUT_SESSION_ID}&application_id=app-123"
        )
        assert params["cancel_url"] == "http://localhost:5173/payment-failed?application_id=app-123"


class TestCreateCheckoutSession:

    def setup_method(self):
        self.service = PaymentService(
            api_key="sk_test_unit",
            client_url="http://localhost:5173",
            image_url="https://img/x.png",
        )

    @pytest.mark.asyncio
    async def test_returns_session_url(self):
        session = SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")
        with patch("stripe.checkout.Session.create", return_value=session) as mock_create:
            result = await self.service.create_checkout_session(_request())

        assert result.url == session.url
        kwargs = mock_create.call_args.kwargs
        assert kwargs["api_key"] == "sk_test_unit"
        assert kwargs["line_items"][0]["price_data"]["unit_amount"] == 4999

    @pytest.mark.asyncio
    async def test_stripe_error_message_is_surfaced(self):
        error = stripe.InvalidRequestError("Amount must be at least $0.50 usd", param="unit_amount")
        with patch("stripe.checkout.Session.create", side_effect=error):
            with pytest.raises(PaymentProviderError, match="Amount must be at least"):
                await self.service.create_checkout_session(_request(totalAmount=0.1))

    @pytest.mark.asyncio
    async def test_unexpected_error_is_wrapped(self):
        with patch("stripe.checkout.Session.create", side_effect=RuntimeError("socket closed")):
            with pytest.raises(PaymentProviderError, match="socket closed"):
                await self.service.create_checkout_session(_request())
