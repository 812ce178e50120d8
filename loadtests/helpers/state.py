"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state: no cross-user sharing.
"""

from dataclasses import dataclass, field


@dataclass
class ShopperState:
    """Tracks one simulated shopper's cart lines and resulting order."""

    headers: dict = field(default_factory=dict)
    item_ids: list[str] = field(default_factory=list)
    order_id: str | None = None
    order_status: str | None = None
