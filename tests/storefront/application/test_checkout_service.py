"""Application tests for checkout: resolution, reservation, placement and compensation."""

import re
from unittest.mock import patch

import pytest
from protean import current_domain
from protean.exceptions import ExpectedVersionError, TransactionError, ValidationError
from sqlalchemy.exc import OperationalError

from storefront.cart.cart import ShoppingCart
from storefront.checkout.resolver import CartSnapshotResolver
from storefront.checkout.service import CheckoutDetails, CheckoutService
from storefront.errors import (
    CheckoutFailed,
    EmptyCart,
    InsufficientStock,
    NoCart,
    NoValidSelection,
    OrderNumberExhausted,
    ProductUnavailable,
)
from storefront.inventory.ledger import InventoryLedger
from storefront.inventory.product import Product
from storefront.order.order import Order, OrderStatus, PaymentStatus

USER = "user-001"


def _commit_failure(reason):
    error = TransactionError(f"Unit of Work commit failed: {reason}")
    error.__cause__ = OperationalError("COMMIT", {}, Exception(reason))
    return error


def _details(selected_item_ids=(), payment_method="bank_transfer"):
    return CheckoutDetails(
        shipping_name="Jane Doe",
        shipping_phone="0812345678",
        shipping_address="1 Main Street, Springfield",
        payment_method=payment_method,
        notes="Ring twice",
        selected_item_ids=tuple(selected_item_ids),
    )


def _stock(product_id):
    return current_domain.repository_for(Product).get(product_id).stock_quantity


def _cart_lines(user_id=USER):
    cart = current_domain.repository_for(ShoppingCart).find_for_user(user_id)
    return {str(item.id): item.quantity for item in cart.items}


def _orders():
    return current_domain.repository_for(Order).all_matching()


@pytest.fixture()
def two_line_cart(register_product, add_to_cart):
    """Product A qty 2 @ 50.00 and product B qty 3 @ 30.00."""
    product_a = register_product(name="Tote", price=50.0, stock_quantity=10)
    product_b = register_product(name="Mug", price=30.0, stock_quantity=10)
    line_a = add_to_cart(USER, product_a, 2)
    line_b = add_to_cart(USER, product_b, 3)
    return {"product_a": product_a, "product_b": product_b, "line_a": line_a, "line_b": line_b}


class TestCartSnapshotResolver:
    def test_no_cart(self):
        with pytest.raises(NoCart):
            CartSnapshotResolver().resolve(USER)

    def test_empty_cart(self):
        current_domain.repository_for(ShoppingCart).get_or_create_for(USER)
        with pytest.raises(EmptyCart):
            CartSnapshotResolver().resolve(USER)

    def test_whole_cart_when_nothing_selected(self, two_line_cart):
        snapshot = CartSnapshotResolver().resolve(USER, [])
        assert len(snapshot.lines) == 2
        assert str(snapshot.total) == "190.00"

    def test_selection_filters_lines(self, two_line_cart):
        snapshot = CartSnapshotResolver().resolve(USER, [two_line_cart["line_a"]])
        assert snapshot.cart_item_ids == [two_line_cart["line_a"]]

    def test_selection_ignores_foreign_ids(self, two_line_cart):
        snapshot = CartSnapshotResolver().resolve(USER, [two_line_cart["line_b"], "not-mine"])
        assert snapshot.cart_item_ids == [two_line_cart["line_b"]]

    def test_selection_with_no_matches(self, two_line_cart):
        with pytest.raises(NoValidSelection):
            CartSnapshotResolver().resolve(USER, ["not-mine"])

    def test_uses_current_price(self, two_line_cart):
        repo = current_domain.repository_for(Product)
        product = repo.get(two_line_cart["product_a"])
        product.price = 55.0
        repo.add(product)

        snapshot = CartSnapshotResolver().resolve(USER)
        assert str(snapshot.total) == "200.00"

    def test_vanished_product(self, two_line_cart):
        repo = current_domain.repository_for(Product)
        repo._dao.delete(repo.get(two_line_cart["product_b"]))

        with pytest.raises(ProductUnavailable):
            CartSnapshotResolver().resolve(USER)


class TestSuccessfulCheckout:
    def test_full_cart(self, two_line_cart):
        order = CheckoutService().checkout(USER, _details())

        assert order.total_amount == 190.0
        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert re.match(r"^ORD-\d{8}-[A-Z0-9]{6}$", order.order_number)
        assert len(order.items) == 2
        assert _cart_lines() == {}
        assert _stock(two_line_cart["product_a"]) == 8
        assert _stock(two_line_cart["product_b"]) == 7

    def test_partial_checkout(self, two_line_cart):
        order = CheckoutService().checkout(USER, _details([two_line_cart["line_a"]]))

        assert [item.product_name for item in order.items] == ["Tote"]
        assert order.total_amount == 100.0
        assert _cart_lines() == {two_line_cart["line_b"]: 3}
        assert _stock(two_line_cart["product_a"]) == 8
        assert _stock(two_line_cart["product_b"]) == 10

    def test_snapshot_survives_price_change(self, two_line_cart):
        order = CheckoutService().checkout(USER, _details())
        repo = current_domain.repository_for(Product)
        product = repo.get(two_line_cart["product_a"])
        product.price = 999.0
        repo.add(product)

        reloaded = current_domain.repository_for(Order).get(order.id)
        assert reloaded.total_amount == 190.0
        assert sorted(item.price for item in reloaded.items) == [30.0, 50.0]

    def test_stock_is_conserved(self, register_product, add_to_cart):
        products = [register_product(name=f"P{i}", price=10.0, stock_quantity=20) for i in range(3)]
        quantities = [1, 4, 7]
        for product_id, quantity in zip(products, quantities, strict=True):
            add_to_cart(USER, product_id, quantity)

        order = CheckoutService().checkout(USER, _details())

        ordered = {str(item.product_id): item.quantity for item in order.items}
        for product_id in products:
            assert _stock(product_id) + ordered[product_id] == 20

    def test_order_numbers_are_unique(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=100)
        numbers = set()
        for _ in range(10):
            add_to_cart(USER, product_id, 1)
            numbers.add(CheckoutService().checkout(USER, _details()).order_number)
        assert len(numbers) == 10


class TestRejectedCheckout:
    def test_insufficient_stock_mutates_nothing(self, register_product, add_to_cart):
        product_id = register_product(name="Print", stock_quantity=5)
        add_to_cart(USER, product_id, 10)

        with pytest.raises(InsufficientStock) as exc:
            CheckoutService().checkout(USER, _details())

        assert exc.value.message == "Insufficient stock for 'Print'. Available: 5"
        assert _stock(product_id) == 5
        assert _orders() == []
        assert len(_cart_lines()) == 1

    def test_invalid_payment_method_rejected_before_reservation(self, two_line_cart):
        with pytest.raises(ValidationError):
            CheckoutService().checkout(USER, _details(payment_method="credit_card"))

        assert _stock(two_line_cart["product_a"]) == 10
        assert _stock(two_line_cart["product_b"]) == 10
        assert _orders() == []

    def test_lost_race_restores_earlier_reservations(self, two_line_cart):
        real_reserve = InventoryLedger.reserve

        def reserve_first_only(ledger, product_id, quantity):
            if str(product_id) == two_line_cart["product_b"]:
                return False
            return real_reserve(ledger, product_id, quantity)

        with patch.object(InventoryLedger, "reserve", autospec=True, side_effect=reserve_first_only):
            with pytest.raises(InsufficientStock):
                CheckoutService().checkout(USER, _details())

        assert _stock(two_line_cart["product_a"]) == 10
        assert _stock(two_line_cart["product_b"]) == 10
        assert _orders() == []
        assert len(_cart_lines()) == 2

    @pytest.mark.parametrize(
        "contention",
        [
            ExpectedVersionError("Wrong expected version: 3 (Aggregate: Product, Version: 4)"),
            OperationalError("UPDATE product", {}, Exception("database is locked")),
            _commit_failure("database is locked"),
        ],
        ids=["version-conflict", "lock-wait", "commit-lock"],
    )
    def test_contended_reservation_reports_insufficient_stock(self, two_line_cart, contention):
        real_reserve = InventoryLedger.reserve

        def contended_on_second_line(ledger, product_id, quantity):
            if str(product_id) == two_line_cart["product_b"]:
                raise contention
            return real_reserve(ledger, product_id, quantity)

        with patch.object(InventoryLedger, "reserve", autospec=True, side_effect=contended_on_second_line):
            with pytest.raises(InsufficientStock):
                CheckoutService().checkout(USER, _details())

        assert _stock(two_line_cart["product_a"]) == 10
        assert _stock(two_line_cart["product_b"]) == 10
        assert _orders() == []
        assert len(_cart_lines()) == 2

    def test_unrelated_commit_failure_is_a_fault(self, two_line_cart):
        error = TransactionError("Unit of Work commit failed: disk I/O error")
        error.__cause__ = OSError("disk I/O error")

        with patch.object(InventoryLedger, "reserve", autospec=True, side_effect=error):
            with pytest.raises(CheckoutFailed):
                CheckoutService().checkout(USER, _details())

        assert _stock(two_line_cart["product_a"]) == 10
        assert _orders() == []


class TestCheckoutFaults:
    def test_fault_while_placing_order_compensates(self, two_line_cart):
        with patch("storefront.order.placement.Order.place", side_effect=RuntimeError("database unavailable")):
            with pytest.raises(CheckoutFailed) as exc:
                CheckoutService().checkout(USER, _details())

        assert str(exc.value) == "Failed to create order. Please try again later."
        assert isinstance(exc.value.__cause__, RuntimeError)
        assert _stock(two_line_cart["product_a"]) == 10
        assert _stock(two_line_cart["product_b"]) == 10
        assert _orders() == []
        assert len(_cart_lines()) == 2

    def test_fault_is_logged_with_user(self, two_line_cart):
        with (
            patch("storefront.order.placement.Order.place", side_effect=RuntimeError("database unavailable")),
            patch("storefront.checkout.service.logger") as mock_logger,
        ):
            with pytest.raises(CheckoutFailed):
                CheckoutService().checkout(USER, _details())

        args, kwargs = mock_logger.error.call_args_list[0]
        assert args[0] == "Checkout failed"
        assert kwargs["user_id"] == USER
        assert kwargs["exc_info"] is True

    def test_failed_compensation_does_not_mask_fault(self, two_line_cart):
        with (
            patch("storefront.order.placement.Order.place", side_effect=RuntimeError("database unavailable")),
            patch.object(InventoryLedger, "restore", side_effect=RuntimeError("still down")),
            patch("storefront.checkout.service.logger") as mock_logger,
        ):
            with pytest.raises(CheckoutFailed):
                CheckoutService().checkout(USER, _details())

        messages = [call.args[0] for call in mock_logger.error.call_args_list]
        assert messages.count("Stock compensation failed") == 2

    def test_order_number_collision_retries(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=10)
        add_to_cart(USER, product_id, 1)
        with patch("storefront.order.repository.generate_order_number", return_value="ORD-20260101-AAAAAA"):
            CheckoutService().checkout(USER, _details())

        add_to_cart(USER, product_id, 1)
        with patch(
            "storefront.order.repository.generate_order_number",
            side_effect=["ORD-20260101-AAAAAA", "ORD-20260101-AAAAAA", "ORD-20260101-BBBBBB"],
        ):
            order = CheckoutService().checkout(USER, _details())

        assert order.order_number == "ORD-20260101-BBBBBB"

    def test_exhausted_order_numbers_compensate(self, register_product, add_to_cart):
        product_id = register_product(stock_quantity=10)
        add_to_cart(USER, product_id, 1)
        with patch("storefront.order.repository.generate_order_number", return_value="ORD-20260101-AAAAAA"):
            CheckoutService().checkout(USER, _details())

            add_to_cart(USER, product_id, 2)
            with pytest.raises(OrderNumberExhausted):
                CheckoutService().checkout(USER, _details())

        assert _stock(product_id) == 9
        assert len(_orders()) == 1
        assert len(_cart_lines()) == 1
