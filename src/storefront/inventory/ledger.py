"""Inventory ledger: stock checks, reservations and restorations.

``InventoryLedger`` operates on the Product repository of whatever Unit of
Work is current, so order cancellation can restore stock atomically with the
status change. Checkout instead reserves through ``ReserveStock`` commands,
each of which commits on its own; checkout compensates with ``RestoreStock``.

Every read-check-write of a counter runs under
``ProductRepository.stock_lock``, so of two overlapping reservations for the
last unit exactly one succeeds.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.inventory.product import Product


class InventoryLedger:
    def _repository(self):
        return current_domain.repository_for(Product)

    def available(self, product_id) -> int:
        product = self._repository().get(product_id)
        return product.stock_quantity or 0

    def has_stock(self, product_id, quantity: int) -> bool:
        return self._repository().get(product_id).has_stock(quantity)

    def reserve(self, product_id, quantity: int) -> bool:
        """Decrement stock by ``quantity`` if available; ``False`` leaves it untouched."""
        repo = self._repository()
        with repo.stock_lock(product_id):
            product = repo.get(product_id)
            if not product.reserve(quantity):
                return False
            repo.add(product)
        return True

    def restore(self, product_id, quantity: int) -> bool:
        """Credit ``quantity`` back. Returns ``False`` when the product no longer exists."""
        repo = self._repository()
        try:
            with repo.stock_lock(product_id):
                product = repo.get(product_id)
                product.restore(quantity)
                repo.add(product)
        except ObjectNotFoundError:
            logger.warning(
                "Skipping stock restore for a product that no longer exists",
                product_id=str(product_id),
                quantity=quantity,
            )
            return False
        return True


@storefront.command(part_of="Product")
class ReserveStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="Product")
class RestoreStock:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Product)
class StockLedgerHandler:
    @handle(ReserveStock)
    def reserve_stock(self, command):
        return InventoryLedger().reserve(command.product_id, command.quantity)

    @handle(RestoreStock)
    def restore_stock(self, command):
        return InventoryLedger().restore(command.product_id, command.quantity)
