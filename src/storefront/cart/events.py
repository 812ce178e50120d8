"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, Text

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its existing line was topped up."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    line_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartQuantityUpdated:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = "v1"

    cart_id = Identifier(required=True)
    removed_count = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartLinesCheckedOut:
    """Cart lines were consumed by a successful checkout."""

    __version__ = "v1"

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    item_ids = Text(required=True)  # JSON: list of consumed cart item ids
