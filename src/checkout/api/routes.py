"""FastAPI routes for the checkout service."""

import os

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from checkout import flow
from checkout.api.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ConfigureGatewayRequest,
    GatewayConfigResponse,
    OrderListResponse,
    OrderResponse,
    WebhookReceivedResponse,
)
from checkout.errors import NotFoundError
from checkout.fulfillment.handler import apply_event
from checkout.gateway import get_gateway
from checkout.gateway.fake_adapter import FakeGateway
from checkout.order import store
from checkout.settings import get_settings
from checkout.webhook.ingress import WebhookIngress


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------
def current_owner(x_user_id: str | None = Header(default=None)) -> str:
    """The authenticated buyer, as asserted by the upstream identity layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id.strip()


def get_ingress() -> WebhookIngress:
    settings = get_settings()
    return WebhookIngress(settings.stripe_webhook_secret, tolerance=settings.webhook_tolerance_seconds)


def _base_url(request: Request) -> str:
    return str(request.base_url).rstrip("/")


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", response_model=CheckoutResponse)
async def start_checkout(
    body: CheckoutRequest,
    request: Request,
    owner_id: str = Depends(current_owner),
) -> CheckoutResponse:
    """Create a pending order for the cart and open a hosted checkout session."""
    started = flow.start_checkout(
        owner_id,
        [item.model_dump() for item in body.items],
        base_url=_base_url(request),
    )
    return CheckoutResponse(
        order_id=started.order_id,
        session_id=started.session_id,
        redirect_url=started.redirect_url,
    )


@checkout_router.post("/{order_id}/session", response_model=CheckoutResponse)
async def resume_checkout(
    order_id: str,
    request: Request,
    owner_id: str = Depends(current_owner),
) -> CheckoutResponse:
    """Re-open the checkout session of a pending order."""
    started = flow.resume_checkout(owner_id, order_id, base_url=_base_url(request))
    return CheckoutResponse(
        order_id=started.order_id,
        session_id=started.session_id,
        redirect_url=started.redirect_url,
    )


@checkout_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only)."""
    if os.environ.get("PROTEAN_ENV") == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(should_succeed=body.should_succeed, failure_reason=body.failure_reason)
    return GatewayConfigResponse(should_succeed=gateway.should_succeed, failure_reason=gateway.failure_reason)


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@webhook_router.post("/stripe", response_model=WebhookReceivedResponse)
async def receive_stripe_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    ingress: WebhookIngress = Depends(get_ingress),
) -> WebhookReceivedResponse:
    """Ingest a Stripe event.

    Any authenticated, well-formed event is acknowledged with 200 whatever
    its business outcome, so the processor does not redeliver it.
    """
    raw_body = await request.body()
    event = ingress.receive(raw_body, stripe_signature)
    outcome = apply_event(event)
    return WebhookReceivedResponse(received=True, outcome=outcome.value)


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


def _owned_order(order_id: str, owner_id: str):
    order = store.get_order(order_id)
    if str(order.owner_id) != owner_id:
        raise NotFoundError(order_id)
    return order


@order_router.get("", response_model=OrderListResponse)
async def list_orders(owner_id: str = Depends(current_owner)) -> OrderListResponse:
    orders = store.orders_for_owner(owner_id)
    return OrderListResponse(orders=[OrderResponse.from_order(order) for order in orders])


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, owner_id: str = Depends(current_owner)) -> OrderResponse:
    return OrderResponse.from_order(_owned_order(order_id, owner_id))


@order_router.post("/{order_id}/cancel", response_model=OrderResponse)
async def cancel_order(order_id: str, owner_id: str = Depends(current_owner)) -> OrderResponse:
    """Abandon a pending order; settled orders answer 409."""
    return OrderResponse.from_order(flow.cancel_order(owner_id, order_id))
