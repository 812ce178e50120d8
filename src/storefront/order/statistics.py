"""Admin dashboard figures computed over the Order repository."""

from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus, PaymentStatus
from storefront.utils.money import as_float, to_money


def _revenue(orders) -> float:
    paid = (to_money(o.total_amount) for o in orders if o.payment_status == PaymentStatus.PAID.value)
    return as_float(sum(paid, to_money(0)))


def _placed_on(order, day) -> bool:
    created_at = order.created_at
    if created_at is None:
        return False
    if created_at.tzinfo is not None:
        created_at = created_at.astimezone(UTC)
    return created_at.date() == day


def order_statistics(today=None) -> dict:
    """Status counts plus revenue from paid orders, overall and for ``today`` (UTC)."""
    today = today or datetime.now(UTC).date()
    orders = current_domain.repository_for(Order).all_matching()
    todays = [o for o in orders if _placed_on(o, today)]

    stats = {"total_orders": len(orders)}
    for status in OrderStatus:
        stats[f"{status.value}_orders"] = sum(1 for o in orders if o.status == status.value)
    stats["total_revenue"] = _revenue(orders)
    stats["today_orders"] = len(todays)
    stats["today_revenue"] = _revenue(todays)
    return stats
