"""Response error extraction for load test observability.

Parses Storefront API error responses into human-readable messages.
Handles two response shapes:

- Validation (422): {"message": "Validation failed", "errors": {"field": ["..."]}}
- Everything else (400/401/403/404/500): {"message": "..."}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response."""
    try:
        body = response.json()
    except Exception:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if isinstance(body.get("errors"), dict):
        parts = [f"{field}: {', '.join(str(m) for m in messages)}" for field, messages in body["errors"].items()]
        return " | ".join(parts)

    if "message" in body:
        return str(body["message"])

    # Unknown shape: stringify and truncate
    return str(body)[:300]
