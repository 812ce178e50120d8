"""Admin status override: command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.order.cancellation import restock
from storefront.order.order import ActorRole, Order


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    actor_id = Identifier(required=True)
    actor_role = String(required=True, choices=ActorRole)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous_status = order.status
        released = order.change_status(
            new_status=command.status,
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
        restored = restock(released)
        repo.add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous_status,
            new_status=order.status,
            changed_by=str(command.actor_id),
            restocked_lines=restored,
        )
