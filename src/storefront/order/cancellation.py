"""Order cancellation: command and handler.

The status change and the stock credit-back share one unit of work: if
restoring stock fails, the order stays uncancelled.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.inventory.ledger import InventoryLedger
from storefront.order.order import ActorRole, Order


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    actor_id = Identifier(required=True)
    actor_role = String(choices=ActorRole, default=ActorRole.USER.value)


def restock(items) -> int:
    """Credit ``(product_id, quantity)`` pairs back to inventory; returns how many landed."""
    ledger = InventoryLedger()
    return sum(1 for product_id, quantity in items if ledger.restore(product_id, quantity))


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        released = order.cancel(
            actor_id=command.actor_id,
            actor_role=command.actor_role or ActorRole.USER.value,
        )
        restored = restock(released)
        repo.add(order)

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            order_number=order.order_number,
            cancelled_by=str(command.actor_id),
            payment_status=order.payment_status,
            restocked_lines=restored,
        )
