"""Stripe Checkout adapter.

Creates hosted Stripe Checkout sessions. The order id travels in the
session's metadata and in its payment intent's metadata so every webhook
Stripe sends for the payment can be correlated back to the order.
"""

import stripe
import structlog

from checkout.gateway.port import CheckoutGateway, SessionRequest, SessionResult

logger = structlog.get_logger(__name__)


class StripeGateway(CheckoutGateway):
    """Stripe Checkout gateway using the stripe-python SDK."""

    def __init__(self, api_key: str, timeout: float = 10.0, client: stripe.StripeClient | None = None) -> None:
        self.timeout = timeout
        # The HTTP client bounds every call, including the retries the SDK performs itself.
        self._client = client or stripe.StripeClient(
            api_key,
            http_client=stripe.RequestsClient(timeout=timeout),
        )

    @staticmethod
    def session_params(request: SessionRequest) -> dict:
        params = {
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": request.currency,
                        "unit_amount": item.unit_amount,
                        "product_data": {
                            "name": item.name,
                            "metadata": {"product_ref": item.product_ref},
                        },
                    },
                    "quantity": item.quantity,
                }
                for item in request.line_items
            ],
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "metadata": request.metadata,
            "payment_intent_data": {"metadata": request.metadata},
        }
        if request.customer_ref:
            params["client_reference_id"] = request.customer_ref
        return params

    def create_session(self, request: SessionRequest) -> SessionResult:
        try:
            session = self._client.v1.checkout.sessions.create(
                params=self.session_params(request),
                options={"idempotency_key": request.idempotency_key},
            )
        except stripe.StripeError as e:
            logger.error(
                "stripe_session_failed",
                order_id=request.order_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return SessionResult(
                success=False,
                gateway_status=getattr(e, "code", None) or type(e).__name__,
                failure_reason=e.user_message or str(e),
            )

        logger.info("stripe_session_created", order_id=request.order_id, session_id=session.id)
        return SessionResult(
            success=True,
            session_id=session.id,
            redirect_url=session.url,
            gateway_status=session.status,
        )
