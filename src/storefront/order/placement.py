"""Order placement: command and handler.

``PlaceOrder`` is dispatched by checkout once every line's stock has been
reserved. The handler writes the order, its item snapshots and the removal of
the consumed cart lines in a single unit of work, so either all of it is
visible afterwards or none of it is.
"""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront
from storefront.errors import NoCart
from storefront.order.order import Order, PaymentMethod


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, product_name, price, quantity}
    cart_item_ids = Text(required=True)  # JSON: list of consumed cart line ids
    payment_method = String(required=True, choices=PaymentMethod)
    shipping_name = String(required=True, max_length=255)
    shipping_phone = String(required=True, max_length=20)
    shipping_address = Text(required=True)
    notes = Text()


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items_data = json.loads(command.items) if isinstance(command.items, str) else command.items
        cart_item_ids = (
            json.loads(command.cart_item_ids) if isinstance(command.cart_item_ids, str) else command.cart_item_ids
        )

        cart_repo = current_domain.repository_for(ShoppingCart)
        cart = cart_repo.find_for_user(command.user_id)
        if cart is None:
            raise NoCart()

        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            order_number=order_repo.allocate_order_number(),
            user_id=command.user_id,
            items_data=items_data,
            payment_method=command.payment_method,
            shipping_name=command.shipping_name,
            shipping_phone=command.shipping_phone,
            shipping_address=command.shipping_address,
            notes=command.notes,
        )
        order_repo.add(order)

        cart.check_out_lines(cart_item_ids, order_id=order.id)
        cart_repo.add(cart)

        return str(order.id)
