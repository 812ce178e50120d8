"""Simulated order payment: command and handler."""

from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PayOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)


@storefront.command_handler(part_of=Order)
class PayOrderHandler:
    @handle(PayOrder)
    def pay_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.pay(actor_id=command.user_id)
        repo.add(order)

        logger.info(
            "Order paid",
            order_id=str(order.id),
            order_number=order.order_number,
            user_id=str(command.user_id),
            total_amount=order.total_amount,
        )
