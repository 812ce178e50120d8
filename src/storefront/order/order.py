"""Order aggregate: the durable outcome of a checkout.

An order is written exactly once at checkout together with its OrderItem
snapshots. Afterwards only ``status`` and ``payment_status`` move, through the
transitions below. Orders are never deleted.

State Machine:
    pending → processing → shipped → delivered     (forward path)
    pending/processing → cancelled                 (owner or admin)
    any non-cancelled → cancelled                  (admin status override)

Payment sub-state:
    pending → paid      (pay)
    pending → failed    (cancelled before payment)
    paid → refunded     (cancelled after payment)

Stock held by an order is credited back at most once, on the first
transition into ``cancelled``.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.errors import AlreadyPaidOrCancelled, AuthorizationError, CannotCancel
from storefront.order.events import OrderCancelled, OrderPaid, OrderPlaced, OrderStatusChanged
from storefront.utils.money import as_float, line_subtotal, to_money


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    BANK_TRANSFER = "bank_transfer"
    E_WALLET = "e_wallet"
    COD = "cod"


class ActorRole(Enum):
    USER = "user"
    ADMIN = "admin"


# States from which the owner may cancel
_CANCELLABLE_STATES = {OrderStatus.PENDING, OrderStatus.PROCESSING}

TERMINAL_STATES = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A point-in-time snapshot of one purchased line.

    ``product_id`` is a soft reference: the product may later be renamed,
    repriced or deleted without affecting the order.
    """

    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=30, unique=True)
    user_id = Identifier(required=True)
    items = HasMany(OrderItem)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_name = String(required=True, max_length=255)
    shipping_phone = String(required=True, max_length=20)
    shipping_address = Text(required=True)
    notes = Text()
    paid_at = DateTime()
    cancelled_at = DateTime()
    cancelled_by = Identifier()
    stock_restored = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def paid_orders_record_payment_time(self):
        if self.payment_status == PaymentStatus.PAID.value and self.paid_at is None:
            raise ValidationError({"paid_at": ["Paid orders must record when payment happened"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        order_number,
        user_id,
        items_data,
        payment_method,
        shipping_name,
        shipping_phone,
        shipping_address,
        notes=None,
    ):
        """Create an order from resolved checkout lines.

        Args:
            order_number: Unique human-facing number, see ``numbering``.
            user_id: The purchasing user.
            items_data: List of dicts with product_id, product_name, price, quantity.
            payment_method: One of ``PaymentMethod`` values.
            shipping_name, shipping_phone, shipping_address: Delivery details.
            notes: Optional free-text instructions.
        """
        if not items_data:
            raise ValidationError({"items": ["An order needs at least one item"]})

        now = datetime.now(UTC)
        items = []
        for data in items_data:
            price = to_money(data["price"])
            items.append(
                OrderItem(
                    product_id=data["product_id"],
                    product_name=data["product_name"],
                    price=as_float(price),
                    quantity=data["quantity"],
                    subtotal=as_float(line_subtotal(price, data["quantity"])),
                )
            )
        total = sum((to_money(item.subtotal) for item in items), to_money(0))

        order = cls(
            order_number=order_number,
            user_id=user_id,
            total_amount=as_float(total),
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
            shipping_name=shipping_name,
            shipping_phone=shipping_phone,
            shipping_address=shipping_address,
            notes=notes,
            stock_restored=False,
            created_at=now,
            updated_at=now,
        )
        for item in items:
            order.add_items(item)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                user_id=str(order.user_id),
                total_amount=order.total_amount,
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "product_name": item.product_name,
                            "price": item.price,
                            "quantity": item.quantity,
                            "subtotal": item.subtotal,
                        }
                        for item in order.items
                    ]
                ),
                payment_method=order.payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    def _release_stock(self):
        """Hand out the quantities to credit back, only the first time it is asked."""
        if self.stock_restored:
            return []
        self.stock_restored = True
        return [(str(item.product_id), item.quantity) for item in self.items]

    # -------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------
    def pay(self, actor_id):
        """Simulated payment: flips the order to paid and starts processing."""
        if not self.is_owned_by(actor_id):
            raise AuthorizationError("You do not have permission to pay this order")

        if PaymentStatus(self.payment_status) != PaymentStatus.PENDING:
            raise AlreadyPaidOrCancelled()

        # Its units are back on the shelf, so it can no longer be fulfilled
        if self.status == OrderStatus.CANCELLED.value or self.stock_restored:
            raise AlreadyPaidOrCancelled()

        now = datetime.now(UTC)
        self.paid_at = now
        self.payment_status = PaymentStatus.PAID.value
        self.status = OrderStatus.PROCESSING.value
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                order_number=self.order_number,
                user_id=str(self.user_id),
                total_amount=self.total_amount,
                paid_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------
    def cancel(self, actor_id, actor_role=ActorRole.USER.value):
        """Cancel on behalf of the owner or an admin.

        Returns the ``(product_id, quantity)`` pairs whose stock must be
        credited back in the same unit of work.
        """
        if not self.is_owned_by(actor_id) and actor_role != ActorRole.ADMIN.value:
            raise AuthorizationError("You do not have permission to cancel this order")

        previous = OrderStatus(self.status)
        if previous not in _CANCELLABLE_STATES:
            raise CannotCancel()

        restock = self._release_stock()
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        if PaymentStatus(self.payment_status) == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUNDED.value
        else:
            self.payment_status = PaymentStatus.FAILED.value
        self.cancelled_at = now
        self.cancelled_by = str(actor_id)
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                payment_status=self.payment_status,
                cancelled_by=str(actor_id),
                restocked_items=len(restock),
                cancelled_at=now,
            )
        )
        return restock

    # -------------------------------------------------------------------
    # Admin status override
    # -------------------------------------------------------------------
    def change_status(self, new_status, actor_id, actor_role):
        """Set any of the five statuses. Admin only.

        Unlike ``cancel`` this may force-cancel from shipped or delivered.
        Entering ``cancelled`` releases stock (once per order) and refunds a
        paid order; an unpaid order keeps its payment status.
        """
        if actor_role != ActorRole.ADMIN.value:
            raise AuthorizationError("Only administrators can change order status")

        try:
            target = OrderStatus(new_status)
        except ValueError:
            raise ValidationError(
                {"status": [f"Status must be one of: {', '.join(s.value for s in OrderStatus)}"]}
            ) from None

        previous = OrderStatus(self.status)
        restock = []
        now = datetime.now(UTC)

        if target == OrderStatus.CANCELLED and previous != OrderStatus.CANCELLED:
            restock = self._release_stock()
            self.cancelled_at = now
            self.cancelled_by = str(actor_id)

        self.status = target.value

        if target == OrderStatus.CANCELLED and PaymentStatus(self.payment_status) == PaymentStatus.PAID:
            self.payment_status = PaymentStatus.REFUNDED.value

        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous.value,
                new_status=target.value,
                payment_status=self.payment_status,
                changed_by=str(actor_id),
                restocked_items=len(restock),
                changed_at=now,
            )
        )
        return restock
