"""In-memory product catalogue for development and testing."""

from checkout.catalogue.port import ProductCatalogue, ProductInfo


class InMemoryCatalogue(ProductCatalogue):
    """Catalogue backed by a dict of ``product_ref -> name``.

    Without a product list the catalogue is open: every reference resolves
    and is displayed under its own name.
    """

    def __init__(self, products: dict[str, str] | None = None) -> None:
        self._products = dict(products) if products is not None else None

    def add(self, product_ref: str, name: str) -> None:
        if self._products is None:
            self._products = {}
        self._products[product_ref] = name

    def lookup(self, product_ref: str) -> ProductInfo | None:
        if self._products is None:
            return ProductInfo(product_ref=product_ref, name=product_ref)
        name = self._products.get(product_ref)
        if name is None:
            return None
        return ProductInfo(product_ref=product_ref, name=name)
