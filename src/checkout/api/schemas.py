"""Pydantic request/response schemas for the Checkout API.

These are external contracts (anti-corruption layer) — separate from
internal Protean commands. Amounts are integers in the currency's minor
unit.
"""

from datetime import datetime

from pydantic import BaseModel, Field, StrictInt


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutItemSchema(BaseModel):
    product_ref: str = Field(min_length=1)
    quantity: StrictInt = Field(ge=1)
    unit_price: StrictInt = Field(ge=0)


class CheckoutRequest(BaseModel):
    items: list[CheckoutItemSchema]

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [
                        {"product_ref": "prod-keyboard", "quantity": 3, "unit_price": 1999},
                        {"product_ref": "prod-cable", "quantity": 1, "unit_price": 500},
                    ]
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    order_id: str
    session_id: str
    redirect_url: str


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool
    failure_reason: str = "Processor unavailable"


class GatewayConfigResponse(BaseModel):
    should_succeed: bool
    failure_reason: str


# ---------------------------------------------------------------------------
# Webhooks
# ---------------------------------------------------------------------------
class WebhookReceivedResponse(BaseModel):
    received: bool = True
    outcome: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(BaseModel):
    product_ref: str
    quantity: int
    unit_price: int


class OrderResponse(BaseModel):
    order_id: str
    owner_id: str
    status: str
    total: int
    currency: str
    session_id: str | None = None
    items: list[OrderItemResponse]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        return cls(
            order_id=str(order.id),
            owner_id=str(order.owner_id),
            status=order.status,
            total=order.total,
            currency=order.currency,
            session_id=order.session_id,
            items=[
                OrderItemResponse(product_ref=item.product_ref, quantity=item.quantity, unit_price=item.unit_price)
                for item in order.ordered_items
            ],
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
