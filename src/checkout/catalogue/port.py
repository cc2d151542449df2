"""Product catalogue port.

The checkout only needs a product's display name for the hosted payment
page; prices always come from the order's own snapshot.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class ProductInfo:
    product_ref: str
    name: str


class ProductCatalogue(ABC):
    @abstractmethod
    def lookup(self, product_ref: str) -> ProductInfo | None:
        """Return the product, or ``None`` if the catalogue does not know it."""
        ...
