"""Product catalogue factory.

get_catalogue() / set_catalogue() swap the collaborator the checkout flow
uses to resolve display names.
"""

from checkout.catalogue.memory_adapter import InMemoryCatalogue
from checkout.catalogue.port import ProductCatalogue

_current_catalogue: ProductCatalogue | None = None


def get_catalogue() -> ProductCatalogue:
    """Return the current catalogue. Defaults to an open InMemoryCatalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = InMemoryCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: ProductCatalogue) -> None:
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    global _current_catalogue
    _current_catalogue = None
