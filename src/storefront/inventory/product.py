"""Product aggregate (CQRS): owns the per-product stock counter.

Stock is only ever changed through ``reserve`` and ``restore``, and only
while the product is held under ``ProductRepository.stock_lock``. Reservation
is a compare-and-decrement: it either takes the full quantity or leaves the
counter untouched and reports ``False``. Restoration is unbounded because no
per-order reservation ledger is kept, only the aggregate count.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String

from storefront.domain import storefront
from storefront.inventory.events import ProductRegistered, StockReserved, StockRestored
from storefront.utils.money import as_float, to_money


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def stock_can_never_go_negative(self):
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": ["Stock quantity cannot be negative"]})

    @classmethod
    def register(cls, name, price, stock_quantity=0):
        now = datetime.now(UTC)
        product = cls(
            name=name,
            price=as_float(to_money(price)),
            stock_quantity=stock_quantity,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=product.name,
                price=product.price,
                stock_quantity=product.stock_quantity,
                registered_at=now,
            )
        )
        return product

    @property
    def unit_price(self):
        return to_money(self.price)

    def has_stock(self, quantity: int) -> bool:
        return quantity <= (self.stock_quantity or 0)

    def reserve(self, quantity: int) -> bool:
        """Take ``quantity`` units out of stock, or nothing at all."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        if not self.has_stock(quantity):
            return False

        previous = self.stock_quantity or 0
        now = datetime.now(UTC)
        self.stock_quantity = previous - quantity
        self.updated_at = now

        self.raise_(
            StockReserved(
                product_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                reserved_at=now,
            )
        )
        return True

    def restore(self, quantity: int) -> None:
        """Credit ``quantity`` units back to stock."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous = self.stock_quantity or 0
        now = datetime.now(UTC)
        self.stock_quantity = previous + quantity
        self.updated_at = now

        self.raise_(
            StockRestored(
                product_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.stock_quantity,
                restored_at=now,
            )
        )
