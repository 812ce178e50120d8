"""Storefront bounded context: inventory ledger, shopping carts, checkout and orders.

Products carry the stock counter that checkout reserves against. Carts are
per-user staging areas (CQRS). Checkout converts cart lines into an immutable
Order snapshot, and the Order aggregate governs the payment and fulfilment
lifecycle, restoring stock on cancellation.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
