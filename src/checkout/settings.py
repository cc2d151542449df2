"""Runtime settings for the checkout service, read from the environment.

Secrets are handed to the components that need them (the webhook ingress,
the Stripe adapter) when those components are built; nothing reads them
from module-level globals.
"""

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    stripe_secret_key: str = ""
    stripe_webhook_secret: str = ""
    gateway: str = "fake"  # fake | stripe
    currency: str = "usd"
    webhook_tolerance_seconds: int = 300
    gateway_timeout_seconds: float = 10.0
    store_timeout_seconds: float = 5.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            stripe_secret_key=os.environ.get("STRIPE_SECRET_KEY", ""),
            stripe_webhook_secret=os.environ.get("STRIPE_WEBHOOK_SECRET", ""),
            gateway=os.environ.get("CHECKOUT_GATEWAY", "fake"),
            currency=os.environ.get("CHECKOUT_CURRENCY", "usd").lower(),
            webhook_tolerance_seconds=int(os.environ.get("CHECKOUT_WEBHOOK_TOLERANCE", "300")),
            gateway_timeout_seconds=float(os.environ.get("CHECKOUT_GATEWAY_TIMEOUT", "10")),
            store_timeout_seconds=float(os.environ.get("CHECKOUT_STORE_TIMEOUT", "5")),
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
