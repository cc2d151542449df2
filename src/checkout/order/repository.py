"""Repository for the Order aggregate."""

from checkout.domain import checkout
from checkout.order.order import Order


@checkout.repository(part_of=Order)
class OrderRepository:
    def find_by_owner(self, owner_id) -> list[Order]:
        """All orders placed by ``owner_id``, oldest first."""
        orders = self._dao.query.filter(owner_id=str(owner_id)).all().items
        return sorted(orders, key=lambda order: order.created_at)
