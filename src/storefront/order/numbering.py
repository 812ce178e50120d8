"""Human-facing order numbers: ``ORD-YYYYMMDD-XXXXXX``."""

import secrets
import string
from datetime import UTC, datetime

from protean.utils.globals import current_domain

_ALPHABET = string.ascii_uppercase + string.digits
_SUFFIX_LENGTH = 6

DEFAULT_PREFIX = "ORD"
DEFAULT_MAX_ATTEMPTS = 5


def generate_order_number(prefix=DEFAULT_PREFIX, today=None) -> str:
    today = today or datetime.now(UTC).date()
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(_SUFFIX_LENGTH))
    return f"{prefix}-{today:%Y%m%d}-{suffix}"


def numbering_settings() -> tuple[str, int]:
    """Read prefix and collision-retry budget from the domain's ``[custom]`` config."""
    custom = current_domain.config.get("custom") or {}
    prefix = custom.get("ORDER_NUMBER_PREFIX", DEFAULT_PREFIX)
    max_attempts = int(custom.get("ORDER_NUMBER_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS))
    return prefix, max(max_attempts, 1)
