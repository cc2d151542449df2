"""Line-item pricing. Validates a buyer's line items and totals them.

All amounts are integers in the currency's minor unit (cents). Floats are
rejected outright rather than rounded, so a total can never drift.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from protean.exceptions import ValidationError


@dataclass(frozen=True)
class PricedLine:
    position: int
    product_ref: str
    quantity: int
    unit_price: int

    @property
    def amount(self) -> int:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class PricedOrder:
    lines: tuple[PricedLine, ...]
    total: int


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _unpack(line):
    if isinstance(line, Mapping):
        return line.get("product_ref"), line.get("quantity"), line.get("unit_price")
    product_ref, quantity, unit_price = line
    return product_ref, quantity, unit_price


def price_lines(lines: Iterable) -> PricedOrder:
    """Validate ``(product_ref, quantity, unit_price)`` entries and compute the total.

    Entries may be tuples or mappings with those keys. Raises ``ValidationError``
    keyed by the offending entry, e.g. ``items[2].quantity``.
    """
    priced = []
    for position, line in enumerate(lines):
        key = f"items[{position}]"
        try:
            product_ref, quantity, unit_price = _unpack(line)
        except (TypeError, ValueError):
            raise ValidationError({key: ["Expected (product_ref, quantity, unit_price)"]}) from None

        if not isinstance(product_ref, str) or not product_ref.strip():
            raise ValidationError({f"{key}.product_ref": ["Product reference is required"]})
        if not _is_int(quantity):
            raise ValidationError({f"{key}.quantity": ["Quantity must be an integer"]})
        if quantity < 1:
            raise ValidationError({f"{key}.quantity": ["Quantity must be at least 1"]})
        if not _is_int(unit_price):
            raise ValidationError({f"{key}.unit_price": ["Unit price must be an integer amount in minor units"]})
        if unit_price < 0:
            raise ValidationError({f"{key}.unit_price": ["Unit price cannot be negative"]})

        priced.append(
            PricedLine(
                position=position,
                product_ref=product_ref.strip(),
                quantity=quantity,
                unit_price=unit_price,
            )
        )

    if not priced:
        raise ValidationError({"items": ["At least one line item is required"]})

    return PricedOrder(lines=tuple(priced), total=sum(line.amount for line in priced))
