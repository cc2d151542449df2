"""Webhook ingress: authenticates processor notifications and parses them.

Nothing in the body is looked at until its signature over the raw bytes
has been verified with the shared signing secret and its timestamp is
within the freshness tolerance.
"""

from dataclasses import dataclass, field
from enum import Enum

import stripe
import structlog
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from checkout.errors import AuthenticationError, MalformedPayloadError

logger = structlog.get_logger(__name__)

DEFAULT_TOLERANCE_SECONDS = 300


class EventKind(Enum):
    CHECKOUT_COMPLETED = "checkout_completed"
    PAYMENT_FAILED = "payment_failed"
    SESSION_EXPIRED = "session_expired"
    UNKNOWN = "unknown"


_KIND_BY_TYPE = {
    "checkout.session.completed": EventKind.CHECKOUT_COMPLETED,
    "checkout.session.async_payment_succeeded": EventKind.CHECKOUT_COMPLETED,
    "checkout.session.async_payment_failed": EventKind.PAYMENT_FAILED,
    "payment_intent.payment_failed": EventKind.PAYMENT_FAILED,
    "checkout.session.expired": EventKind.SESSION_EXPIRED,
}


def kind_for(event_type: str) -> EventKind:
    return _KIND_BY_TYPE.get(event_type, EventKind.UNKNOWN)


class _EventData(BaseModel):
    object_: dict = Field(alias="object")


class _EventEnvelope(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1, max_length=255)
    type: str = Field(min_length=1)
    data: _EventData


@dataclass(frozen=True)
class VerifiedEvent:
    """An authenticated, parsed webhook event."""

    id: str
    type: str
    kind: EventKind
    order_id: str | None = None
    payload: dict = field(default_factory=dict, compare=False)


class WebhookIngress:
    """Verifies and parses webhook deliveries signed with ``secret``."""

    def __init__(self, secret: str, tolerance: int = DEFAULT_TOLERANCE_SECONDS) -> None:
        self._secret = secret
        self.tolerance = tolerance

    def verify(self, raw_body: bytes, signature_header: str | None) -> str:
        """Return the body as text once its signature checks out."""
        if not self._secret:
            logger.error("webhook_secret_missing")
            raise AuthenticationError("Webhook signing secret is not configured")
        if not signature_header:
            logger.warning("webhook_signature_rejected", reason="missing signature header")
            raise AuthenticationError("Missing signature header")

        try:
            body = raw_body.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("webhook_signature_rejected", reason="body is not valid UTF-8")
            raise AuthenticationError("Webhook body could not be verified") from None

        try:
            stripe.WebhookSignature.verify_header(body, signature_header, self._secret, tolerance=self.tolerance)
        except stripe.SignatureVerificationError as e:
            # The payload is never logged; only why it was refused.
            logger.warning("webhook_signature_rejected", reason=str(e))
            raise AuthenticationError("Invalid webhook signature") from None

        return body

    def parse(self, body: str) -> VerifiedEvent:
        try:
            envelope = _EventEnvelope.model_validate_json(body)
        except PydanticValidationError as e:
            logger.warning("webhook_payload_malformed", errors=e.error_count())
            raise MalformedPayloadError("Webhook body is not an event envelope") from None

        kind = kind_for(envelope.type)
        data_object = envelope.data.object_
        metadata = data_object.get("metadata") or {}
        order_id = metadata.get("order_id") if isinstance(metadata, dict) else None

        if kind is not EventKind.UNKNOWN and not order_id:
            logger.error(
                "webhook_missing_order_reference",
                event_id=envelope.id,
                event_type=envelope.type,
            )
            raise MalformedPayloadError(f"Event {envelope.id} of type {envelope.type} carries no order reference")

        return VerifiedEvent(
            id=envelope.id,
            type=envelope.type,
            kind=kind,
            order_id=str(order_id) if order_id else None,
            payload=data_object,
        )

    def receive(self, raw_body: bytes, signature_header: str | None) -> VerifiedEvent:
        """Authenticate then parse a delivery.

        Raises ``AuthenticationError`` (signature or freshness) or
        ``MalformedPayloadError`` (envelope or order correlation).
        """
        event = self.parse(self.verify(raw_body, signature_header))
        logger.info("webhook_received", event_id=event.id, event_type=event.type, order_id=event.order_id)
        return event
