"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state — no cross-user sharing.
State tracks the ids returned by checkout so follow-up webhook deliveries
can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CheckoutState:
    """Tracks state for a single simulated checkout."""

    buyer_id: str | None = None
    order_id: str | None = None
    session_id: str | None = None
    event_id: str | None = None
    current_status: str = "pending"
    outcomes: list[str] = field(default_factory=list)
