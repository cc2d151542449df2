"""Response error extraction for load test observability.

Parses checkout API error responses into human-readable messages.
Handles two response shapes:

- Framework errors (401/403): {"detail": "msg"}
- Checkout errors (400/404/409/502/503): {"error": "msg"} or {"error": {"field": ["msg"]}}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    Gracefully handles unparseable bodies and missing fields.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON — return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            parts = []
            for field, messages in error.items():
                if isinstance(messages, list):
                    messages = "; ".join(str(m) for m in messages)
                parts.append(f"{field}: {messages}")
            detail = " | ".join(parts)
        else:
            detail = str(error)
        if body.get("order_id"):
            detail = f"{detail} (order {body['order_id']})"
        return detail

    if "detail" in body:
        return str(body["detail"])

    # Unknown shape — stringify and truncate
    return str(body)[:300]
