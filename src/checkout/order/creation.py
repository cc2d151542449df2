"""Order placement — command and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.order.order import Order
from checkout.order.pricing import price_lines


@checkout.command(part_of="Order")
class PlaceOrder:
    owner_id = Identifier(required=True)
    items = Text(required=True)  # JSON: [{product_ref, quantity, unit_price}]
    currency = String(max_length=3, required=True)


@checkout.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        # The order and all of its items are persisted in this handler's
        # unit of work; nothing is written if any line fails to price.
        priced = price_lines(json.loads(command.items))
        order = Order.create(
            owner_id=command.owner_id,
            priced=priced,
            currency=command.currency,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
