"""Repository for the Order aggregate: lookups, listings and number allocation."""

from protean.exceptions import ObjectNotFoundError

from storefront.domain import storefront
from storefront.errors import OrderNumberExhausted
from storefront.order.numbering import generate_order_number, numbering_settings
from storefront.order.order import Order

_PAGE_SIZE = 100


@storefront.repository(part_of=Order)
class OrderRepository:
    def all_matching(self, **filters) -> list[Order]:
        """Every order matching ``filters``, across as many pages as it takes."""
        query = self._dao.query.filter(**filters) if filters else self._dao.query
        records = []
        offset = 0
        while True:
            result = query.offset(offset).limit(_PAGE_SIZE).all()
            records.extend(result.items)
            if not result.has_next:
                break
            offset += _PAGE_SIZE
        return [self.get(record.id) for record in records]

    def find_by_number(self, order_number) -> Order | None:
        results = self._dao.query.filter(order_number=order_number).all().items
        if not results:
            return None
        return self.get(results[0].id)

    def get_by_number(self, order_number) -> Order:
        order = self.find_by_number(order_number)
        if order is None:
            raise ObjectNotFoundError({"order_number": [f"Order '{order_number}' does not exist"]})
        return order

    def for_user(self, user_id, status=None) -> list[Order]:
        """The user's own orders, newest first."""
        filters = {"user_id": str(user_id)}
        if status:
            filters["status"] = status
        return _newest_first(self.all_matching(**filters))

    def search(self, status=None, payment_status=None, search=None) -> list[Order]:
        """Admin listing. ``search`` matches order number or shipping name, case-insensitively."""
        filters = {}
        if status:
            filters["status"] = status
        if payment_status:
            filters["payment_status"] = payment_status

        orders = self.all_matching(**filters)
        if search:
            needle = search.lower()
            orders = [
                order
                for order in orders
                if needle in order.order_number.lower() or needle in (order.shipping_name or "").lower()
            ]
        return _newest_first(orders)

    def allocate_order_number(self) -> str:
        """Draw order numbers until one is not taken, within the configured budget."""
        prefix, max_attempts = numbering_settings()
        for _ in range(max_attempts):
            candidate = generate_order_number(prefix)
            if self.find_by_number(candidate) is None:
                return candidate
        raise OrderNumberExhausted()


def _newest_first(orders):
    return sorted(orders, key=lambda order: order.created_at, reverse=True)
