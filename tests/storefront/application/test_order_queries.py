"""Application tests for order listings and admin statistics."""

from datetime import UTC, datetime, timedelta

from protean import current_domain

from storefront.checkout.service import CheckoutDetails, CheckoutService
from storefront.order.order import Order
from storefront.order.payment import PayOrder
from storefront.order.statistics import order_statistics


def _checkout(user_id, product_id, add_to_cart, shipping_name="Jane Doe", quantity=1):
    add_to_cart(user_id, product_id, quantity)
    return CheckoutService().checkout(
        user_id,
        CheckoutDetails(
            shipping_name=shipping_name,
            shipping_phone="0812345678",
            shipping_address="1 Main Street",
            payment_method="cod",
        ),
    )


class TestOrderRepository:
    def test_for_user_returns_only_own_orders(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=50)
        mine = _checkout("user-001", product_id, add_to_cart)
        _checkout("user-002", product_id, add_to_cart)

        orders = current_domain.repository_for(Order).for_user("user-001")
        assert [o.id for o in orders] == [mine.id]

    def test_for_user_newest_first(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=50)
        first = _checkout("user-001", product_id, add_to_cart)
        second = _checkout("user-001", product_id, add_to_cart)

        orders = current_domain.repository_for(Order).for_user("user-001")
        assert [o.id for o in orders] == [second.id, first.id]

    def test_for_user_status_filter(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=50)
        paid = _checkout("user-001", product_id, add_to_cart)
        _checkout("user-001", product_id, add_to_cart)
        current_domain.process(PayOrder(order_id=paid.id, user_id="user-001"), asynchronous=False)

        orders = current_domain.repository_for(Order).for_user("user-001", status="processing")
        assert [o.id for o in orders] == [paid.id]

    def test_search_by_shipping_name_and_number(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=50)
        alice = _checkout("user-001", product_id, add_to_cart, shipping_name="Alice Smith")
        _checkout("user-002", product_id, add_to_cart, shipping_name="Bob Jones")

        repo = current_domain.repository_for(Order)
        assert [o.id for o in repo.search(search="alice")] == [alice.id]
        assert [o.id for o in repo.search(search=alice.order_number[-6:].lower())] == [alice.id]

    def test_search_by_payment_status(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=50)
        paid = _checkout("user-001", product_id, add_to_cart)
        _checkout("user-002", product_id, add_to_cart)
        current_domain.process(PayOrder(order_id=paid.id, user_id="user-001"), asynchronous=False)

        repo = current_domain.repository_for(Order)
        assert [o.id for o in repo.search(payment_status="paid")] == [paid.id]
        assert len(repo.search(payment_status="pending")) == 1

    def test_find_by_number(self, register_product, add_to_cart):
        order = _checkout("user-001", register_product(), add_to_cart)
        repo = current_domain.repository_for(Order)
        assert repo.find_by_number(order.order_number).id == order.id
        assert repo.find_by_number("ORD-19990101-ZZZZZZ") is None


class TestOrderStatistics:
    def test_counts_and_revenue(self, register_product, add_to_cart):
        product_id = register_product(price=20.0, stock_quantity=50)
        paid = _checkout("user-001", product_id, add_to_cart, quantity=3)
        _checkout("user-002", product_id, add_to_cart, quantity=1)
        current_domain.process(PayOrder(order_id=paid.id, user_id="user-001"), asynchronous=False)

        stats = order_statistics()
        assert stats["total_orders"] == 2
        assert stats["pending_orders"] == 1
        assert stats["processing_orders"] == 1
        assert stats["cancelled_orders"] == 0
        assert stats["total_revenue"] == 60.0
        assert stats["today_orders"] == 2
        assert stats["today_revenue"] == 60.0

    def test_today_is_a_parameter(self, register_product, add_to_cart):
        _checkout("user-001", register_product(), add_to_cart)
        stats = order_statistics(today=datetime.now(UTC).date() - timedelta(days=1))
        assert stats["today_orders"] == 0
        assert stats["total_orders"] == 1

    def test_empty(self):
        stats = order_statistics()
        assert stats["total_orders"] == 0
        assert stats["total_revenue"] == 0.0
