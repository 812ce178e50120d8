"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """Checkout converted cart lines into a new order."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    total_amount = Float(required=True)
    items = Text(required=True)  # JSON: list of {product_id, product_name, price, quantity, subtotal}
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    user_id = Identifier(required=True)
    total_amount = Float(required=True)
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled by its owner or an administrator."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    payment_status = String(required=True)
    cancelled_by = Identifier(required=True)
    restocked_items = Integer(required=True)
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    """An administrator moved the order to a new status."""

    __version__ = "v1"

    order_id = Identifier(required=True)
    order_number = String(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    payment_status = String(required=True)
    changed_by = Identifier(required=True)
    restocked_items = Integer(required=True)
    changed_at = DateTime(required=True)
