"""Domain events raised by the Order aggregate."""

from protean.fields import DateTime, Identifier, Integer, String, Text

from checkout.domain import checkout


@checkout.event(part_of="Order")
class OrderPlaced:
    """A pending order was created from a buyer's line items."""

    order_id = Identifier(required=True)
    owner_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_ref, quantity, unit_price}]
    total = Integer(required=True)
    currency = String(max_length=3, required=True)
    placed_at = DateTime(required=True)


@checkout.event(part_of="Order")
class CheckoutSessionAttached:
    order_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)
    attached_at = DateTime(required=True)


@checkout.event(part_of="Order")
class OrderStatusChanged:
    """The order moved between lifecycle states."""

    order_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_at = DateTime(required=True)
