"""Checkout: converts cart lines into an order while holding stock for it.

Flow:
    1. Resolve the cart snapshot (whole cart or the selected lines).
    2. Pre-check every line against current stock; nothing is mutated on failure.
    3. Build the ``PlaceOrder`` command so bad shipping/payment input is
       rejected before any reservation.
    4. Reserve each line through ``ReserveStock``, in resolution order.
    5. Dispatch ``PlaceOrder``: order, item snapshots and cart-line removal
       commit together.

Each reservation commits in its own unit of work, so any failure from step 4
onwards is compensated by restoring every line reserved so far.
"""

import json
from dataclasses import dataclass, field

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, TransactionError, ValidationError
from protean.utils.globals import current_domain
from sqlalchemy.exc import OperationalError

from storefront.checkout.resolver import CartSnapshotResolver
from storefront.domain import logger
from storefront.errors import CheckoutFailed, InsufficientStock, ProductUnavailable, SystemFault
from storefront.inventory.ledger import InventoryLedger, ReserveStock, RestoreStock
from storefront.order.order import Order
from storefront.order.placement import PlaceOrder


@dataclass(frozen=True)
class CheckoutDetails:
    """Shipping, payment and selection input for one checkout."""

    shipping_name: str
    shipping_phone: str
    shipping_address: str
    payment_method: str
    notes: str | None = None
    selected_item_ids: tuple[str, ...] = field(default_factory=tuple)


class CheckoutService:
    def __init__(self, resolver: CartSnapshotResolver | None = None):
        self.resolver = resolver or CartSnapshotResolver()

    def checkout(self, user_id, details: CheckoutDetails) -> Order:
        snapshot = self.resolver.resolve(user_id, details.selected_item_ids)

        for line in snapshot.lines:
            if not line.in_stock:
                raise InsufficientStock(line.product_name, line.available)

        command = PlaceOrder(
            user_id=str(user_id),
            items=json.dumps([line.as_order_item() for line in snapshot.lines]),
            cart_item_ids=json.dumps(snapshot.cart_item_ids),
            payment_method=details.payment_method,
            shipping_name=details.shipping_name,
            shipping_phone=details.shipping_phone,
            shipping_address=details.shipping_address,
            notes=details.notes,
        )

        reserved = []
        try:
            for line in snapshot.lines:
                self._reserve(line)
                reserved.append(line)

            order_id = current_domain.process(command, asynchronous=False)
        except (ValidationError, SystemFault) as exc:
            if isinstance(exc, SystemFault):
                logger.error("Checkout failed", user_id=str(user_id), error=str(exc), exc_info=True)
            self._compensate(user_id, reserved)
            raise
        except Exception as exc:
            logger.error("Checkout failed", user_id=str(user_id), error=str(exc), exc_info=True)
            self._compensate(user_id, reserved)
            raise CheckoutFailed() from exc

        order = current_domain.repository_for(Order).get(order_id)
        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(user_id),
            total_amount=order.total_amount,
            lines=len(snapshot.lines),
        )
        return order

    def _reserve(self, line):
        try:
            reserved = current_domain.process(
                ReserveStock(product_id=line.product_id, quantity=line.quantity),
                asynchronous=False,
            )
        except ObjectNotFoundError:
            raise ProductUnavailable(line.product_id) from None
        except (ExpectedVersionError, OperationalError, TransactionError) as exc:
            if isinstance(exc, TransactionError) and not isinstance(exc.__cause__, OperationalError):
                raise
            # Lost a race for the row: the reservation was rolled back
            logger.warning(
                "Stock reservation contended",
                product_id=line.product_id,
                quantity=line.quantity,
                error=str(exc),
            )
            reserved = False

        if not reserved:
            raise InsufficientStock(line.product_name, self._available_now(line))

    def _available_now(self, line) -> int:
        try:
            return InventoryLedger().available(line.product_id)
        except ObjectNotFoundError:
            return 0

    def _compensate(self, user_id, reserved):
        """Give back every reservation made so far. Failures are logged, never raised."""
        for line in reversed(reserved):
            try:
                current_domain.process(
                    RestoreStock(product_id=line.product_id, quantity=line.quantity),
                    asynchronous=False,
                )
            except Exception:
                logger.error(
                    "Stock compensation failed",
                    user_id=str(user_id),
                    product_id=line.product_id,
                    quantity=line.quantity,
                    exc_info=True,
                )
