"""Configurable fake checkout gateway for development and testing.

Simulates the hosted checkout without any external calls. Like the real
processor, a repeated request with the same idempotency key returns the
session created the first time.
"""

from uuid import uuid4

from checkout.gateway.port import CheckoutGateway, SessionRequest, SessionResult


class FakeGateway(CheckoutGateway):
    """Configurable fake checkout gateway."""

    def __init__(self, base_url: str = "https://checkout.fake.test/pay") -> None:
        self.base_url = base_url
        self.should_succeed: bool = True
        self.failure_reason: str = "Processor unavailable"
        self.calls: list[SessionRequest] = []
        self._sessions: dict[str, SessionResult] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Processor unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_session(self, request: SessionRequest) -> SessionResult:
        self.calls.append(request)

        if not self.should_succeed:
            return SessionResult(
                success=False,
                gateway_status="failed",
                failure_reason=self.failure_reason,
            )

        existing = self._sessions.get(request.idempotency_key)
        if existing is not None:
            return existing

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        result = SessionResult(
            success=True,
            session_id=session_id,
            redirect_url=f"{self.base_url}/{session_id}",
            gateway_status="open",
        )
        self._sessions[request.idempotency_key] = result
        return result
