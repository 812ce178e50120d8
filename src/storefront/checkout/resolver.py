"""Cart snapshot resolution.

Turns the user's cart (or a selected subset of its lines) into the concrete
lines to purchase, priced at the product's current price.
"""

from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.errors import EmptyCart, NoCart, NoValidSelection, ProductUnavailable
from storefront.inventory.product import Product
from storefront.utils.money import line_subtotal


@dataclass(frozen=True)
class ResolvedLine:
    """One cart line bound to the live state of its product."""

    cart_item_id: str
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int
    available: int

    @property
    def subtotal(self) -> Decimal:
        return line_subtotal(self.unit_price, self.quantity)

    @property
    def in_stock(self) -> bool:
        return self.quantity <= self.available

    def as_order_item(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "price": str(self.unit_price),
            "quantity": self.quantity,
        }


@dataclass(frozen=True)
class CartSnapshot:
    cart_id: str
    lines: tuple[ResolvedLine, ...]

    @property
    def cart_item_ids(self) -> list[str]:
        return [line.cart_item_id for line in self.lines]

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0.00"))


class CartSnapshotResolver:
    def resolve(self, user_id, selected_item_ids=None) -> CartSnapshot:
        """Resolve the lines to check out.

        An empty or missing ``selected_item_ids`` means the whole cart. Ids
        that do not belong to the cart are ignored; if none of them do, the
        selection is rejected.
        """
        cart = current_domain.repository_for(ShoppingCart).find_for_user(user_id)
        if cart is None:
            raise NoCart()

        items = list(cart.items or [])
        if selected_item_ids:
            wanted = {str(item_id) for item_id in selected_item_ids}
            items = [item for item in items if str(item.id) in wanted]
            if not items:
                raise NoValidSelection()

        if not items:
            raise EmptyCart()

        products = current_domain.repository_for(Product)
        lines = []
        for item in items:
            try:
                product = products.get(item.product_id)
            except ObjectNotFoundError:
                raise ProductUnavailable(str(item.product_id)) from None

            lines.append(
                ResolvedLine(
                    cart_item_id=str(item.id),
                    product_id=str(product.id),
                    product_name=product.name,
                    unit_price=product.unit_price,
                    quantity=item.quantity,
                    available=product.stock_quantity or 0,
                )
            )

        return CartSnapshot(cart_id=str(cart.id), lines=tuple(lines))
