"""Processed-event ledger — one record per webhook event id ever handled.

A ProcessedEvent is written in the same unit of work as the order change it
caused, so an event is either fully applied and recorded or neither.
"""

from enum import Enum

from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from checkout.domain import checkout


class Outcome(Enum):
    APPLIED = "applied"
    ALREADY_PROCESSED = "already_processed"
    NO_MATCHING_ORDER = "no_matching_order"
    ALREADY_TERMINAL = "already_terminal"
    IGNORED = "ignored"


@checkout.aggregate
class ProcessedEvent:
    event_id = String(identifier=True, max_length=255)
    event_type = Text(required=True)
    order_id = Identifier()  # Absent for events that carry no order reference
    outcome = String(required=True, choices=Outcome)
    processed_at = DateTime(required=True)


def find_processed(event_id) -> ProcessedEvent | None:
    try:
        return current_domain.repository_for(ProcessedEvent).get(str(event_id))
    except ObjectNotFoundError:
        return None


def is_processed(event_id) -> bool:
    return find_processed(event_id) is not None
