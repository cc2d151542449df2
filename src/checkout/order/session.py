"""Checkout session attachment — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.errors import NotFoundError
from checkout.order.order import Order


@checkout.command(part_of="Order")
class AttachCheckoutSession:
    order_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)


@checkout.command_handler(part_of=Order)
class AttachCheckoutSessionHandler:
    @handle(AttachCheckoutSession)
    def attach_session(self, command):
        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            raise NotFoundError(command.order_id) from None

        order.attach_session(command.session_id)
        repo.add(order)
