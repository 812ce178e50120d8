"""Shopping Cart aggregate (CQRS): one cart per user, created lazily.

A cart holds at most one line per product: adding a product that is already
in the cart tops up that line instead of adding a second one. Line subtotals
are derived from the live product price and never stored here.
"""

import json
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartLinesCheckedOut,
    CartQuantityUpdated,
)
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in (self.items or [])]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        item = next((i for i in (self.items or []) if str(i.id) == str(item_id)), None)
        if item is None:
            raise ObjectNotFoundError({"item_id": ["Item not found in cart"]})
        return item

    def item_for_product(self, product_id):
        return next((i for i in (self.items or []) if str(i.product_id) == str(product_id)), None)

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in (self.items or []))

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity=1):
        """Add a product to the cart, topping up its line if it is already there."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        now = datetime.now(UTC)
        existing = self.item_for_product(product_id)
        if existing:
            existing.quantity += quantity
            item = existing
        else:
            item = CartItem(product_id=product_id, quantity=quantity, added_at=now)
            self.add_items(item)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(product_id),
                quantity=quantity,
                line_quantity=item.quantity,
            )
        )
        return item

    def update_item_quantity(self, item_id, new_quantity):
        if new_quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        item = self.find_item(item_id)
        previous_quantity = item.quantity
        item.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartQuantityUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
            )
        )

    def remove_item(self, item_id):
        item = self.find_item(item_id)
        self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartItemRemoved(cart_id=str(self.id), item_id=str(item_id)))

    def clear(self):
        items = list(self.items or [])
        for item in items:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(CartCleared(cart_id=str(self.id), removed_count=len(items)))

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out_lines(self, item_ids, order_id):
        """Remove the lines consumed by an order. Ids no longer in the cart are ignored."""
        wanted = {str(item_id) for item_id in item_ids}
        consumed = [item for item in (self.items or []) if str(item.id) in wanted]
        for item in consumed:
            self.remove_items(item)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartLinesCheckedOut(
                cart_id=str(self.id),
                order_id=str(order_id),
                item_ids=json.dumps([str(item.id) for item in consumed]),
            )
        )
        return consumed
