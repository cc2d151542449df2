"""Fulfillment handler — applies a verified payment event to its order.

Each event id is applied at most once. The order transition and the ledger
record commit together in the ``ApplyPaymentEvent`` unit of work. Callers
for the same event id, and for the same order, are serialized so the
ledger's insert-if-absent cannot race.
"""

from contextlib import ExitStack
from datetime import UTC, datetime

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.errors import InvalidTransitionError, PersistenceError
from checkout.fulfillment.ledger import Outcome, ProcessedEvent, is_processed
from checkout.order.order import Order, OrderStatus
from checkout.order.store import STORAGE_ERRORS, order_locks
from checkout.settings import get_settings
from checkout.utils.locks import KeyedLock
from checkout.webhook.ingress import EventKind, VerifiedEvent

logger = structlog.get_logger(__name__)

event_locks = KeyedLock("processed_event", timeout=get_settings().store_timeout_seconds)

_TARGET_STATUS = {
    EventKind.CHECKOUT_COMPLETED: OrderStatus.PAID,
    EventKind.PAYMENT_FAILED: OrderStatus.FAILED,
    EventKind.SESSION_EXPIRED: OrderStatus.CANCELLED,
}


@checkout.command(part_of=ProcessedEvent)
class ApplyPaymentEvent:
    event_id = String(required=True, max_length=255)
    event_type = Text(required=True)
    kind = String(required=True, choices=EventKind)
    order_id = Identifier()


@checkout.command_handler(part_of=ProcessedEvent)
class ApplyPaymentEventHandler:
    @handle(ApplyPaymentEvent)
    def apply_payment_event(self, command):
        ledger = current_domain.repository_for(ProcessedEvent)
        if is_processed(command.event_id):
            return Outcome.ALREADY_PROCESSED.value

        outcome = self._apply_to_order(command)

        ledger.add(
            ProcessedEvent(
                event_id=command.event_id,
                event_type=command.event_type,
                order_id=command.order_id,
                outcome=outcome.value,
                processed_at=datetime.now(UTC),
            )
        )
        return outcome.value

    def _apply_to_order(self, command) -> Outcome:
        target = _TARGET_STATUS.get(EventKind(command.kind))
        if target is None:
            return Outcome.IGNORED

        repo = current_domain.repository_for(Order)
        try:
            order = repo.get(command.order_id)
        except ObjectNotFoundError:
            return Outcome.NO_MATCHING_ORDER

        try:
            order.transition([OrderStatus.PENDING.value], target.value)
        except InvalidTransitionError:
            return Outcome.ALREADY_TERMINAL

        repo.add(order)
        return Outcome.APPLIED


def apply_event(event: VerifiedEvent) -> Outcome:
    """Apply ``event`` to its order and record it in the ledger.

    Benign conditions (duplicate delivery, unknown order, order already
    settled, event kind not handled) are reported as outcomes, not errors.
    Raises ``PersistenceError`` if the store is unavailable; the event is
    then not recorded and a redelivery will be applied.
    """
    with ExitStack() as stack:
        stack.enter_context(event_locks.hold(event.id))

        if is_processed(event.id):
            logger.info("webhook_duplicate", event_id=event.id, event_type=event.type)
            return Outcome.ALREADY_PROCESSED

        if event.order_id:
            stack.enter_context(order_locks.hold(event.order_id))

        try:
            result = current_domain.process(
                ApplyPaymentEvent(
                    event_id=event.id,
                    event_type=event.type,
                    kind=event.kind.value,
                    order_id=event.order_id,
                ),
                asynchronous=False,
            )
        except STORAGE_ERRORS as exc:
            logger.error("webhook_apply_failed", event_id=event.id, order_id=event.order_id, error=str(exc))
            raise PersistenceError(f"Event {event.id} could not be applied") from exc

    outcome = Outcome(result)
    if outcome is Outcome.NO_MATCHING_ORDER:
        logger.warning("webhook_order_not_found", event_id=event.id, order_id=event.order_id)
    else:
        logger.info(
            "webhook_applied",
            event_id=event.id,
            event_type=event.type,
            order_id=event.order_id,
            outcome=outcome.value,
        )
    return outcome
