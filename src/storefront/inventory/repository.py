"""Repository for the Product aggregate.

``stock_lock`` isolates a read-check-write of one product's stock counter:

- SQL providers issue a no-op ``UPDATE`` on the product row inside the current
  transaction. The row lock is held until the unit of work commits, so a
  second reservation either waits and then reads the committed counter, or
  fails with a lock error.
- The memory provider commits by swapping in the unit of work's snapshot of
  the whole store. Stock changes therefore run under a process-wide lock in a
  unit of work of their own that commits before the lock is released. When the
  caller's unit of work already holds a snapshot, the change joins it instead.
"""

import threading
from contextlib import contextmanager

from protean import UnitOfWork
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_uow

from storefront.domain import storefront
from storefront.inventory.product import Product

_memory_stock_lock = threading.RLock()


@storefront.repository(part_of=Product)
class ProductRepository:
    @contextmanager
    def stock_lock(self, product_id):
        provider = self._dao.provider
        if provider.__database__ != "memory":
            model = self._dao.database_model_cls
            locked = self._dao.query.filter(id=str(product_id)).update_all(stock_quantity=model.stock_quantity)
            if not locked:
                raise ObjectNotFoundError(f"Product with identifier {product_id} does not exist.")
            yield
            return

        with _memory_stock_lock:
            if current_uow and provider.name in current_uow._sessions:
                yield
                return

            with UnitOfWork():
                yield
