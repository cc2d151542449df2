"""Shared BDD fixtures and step definitions for webhook fulfillment."""

import pytest
from checkout.fulfillment.ledger import ProcessedEvent
from checkout.order.store import create_order, get_order
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def delivery():
    """Mutable holder for the last delivery's outcome."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse('a pending order for "{owner_id}" totalling {total:d}'),
    target_fixture="order",
)
def _(owner_id, total):
    order = create_order(owner_id, [("prod-bdd", 1, total)], "usd")
    assert order.total == total
    return order


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the outcome is "{outcome}"'))
def _(delivery, outcome):
    assert delivery["outcome"] == outcome


@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert get_order(order.id).status == status


@then(parsers.cfparse("{count:d} event is recorded in the ledger"))
def _(count):
    records = current_domain.repository_for(ProcessedEvent)._dao.query.all().items
    assert len(records) == count
