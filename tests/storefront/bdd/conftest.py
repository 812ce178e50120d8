"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.cart.items import AddToCart
from storefront.checkout.service import CheckoutDetails, CheckoutService
from storefront.inventory.product import Product
from storefront.inventory.registration import RegisterProduct
from storefront.order.order import Order

SHOPPER = "shopper-001"


@pytest.fixture()
def shopper():
    return SHOPPER


@pytest.fixture()
def products():
    """Product ids by name for the scenario."""
    return {}


@pytest.fixture()
def outcome():
    """Holds the last order placed and the last error raised."""
    return {"order": None, "error": None}


@pytest.fixture()
def checkout_details():
    """Factory: shipping and payment input, optionally limited to some cart lines."""

    def _details(selected_item_ids=()):
        return CheckoutDetails(
            shipping_name="Jane Doe",
            shipping_phone="0812345678",
            shipping_address="1 Main Street",
            payment_method="bank_transfer",
            selected_item_ids=tuple(selected_item_ids),
        )

    return _details


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    products[name] = current_domain.process(
        RegisterProduct(name=name, price=price, stock_quantity=stock),
        asynchronous=False,
    )


@given(parsers.cfparse('the shopper has {quantity:d} of "{name}" in the cart'))
def _(shopper, products, quantity, name):
    current_domain.process(
        AddToCart(user_id=shopper, product_id=products[name], quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the shopper has placed an order for {quantity:d} of "{name}"'))
def _(shopper, products, outcome, checkout_details, quantity, name):
    current_domain.process(
        AddToCart(user_id=shopper, product_id=products[name], quantity=quantity),
        asynchronous=False,
    )
    outcome["order"] = CheckoutService().checkout(shopper, checkout_details())


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {stock:d} in stock'))
@given(parsers.cfparse('"{name}" has {stock:d} in stock'))
def _(products, name, stock):
    assert current_domain.repository_for(Product).get(products[name]).stock_quantity == stock


@then(parsers.cfparse('the order is "{status}" with payment "{payment_status}"'))
def _(outcome, status, payment_status):
    order = current_domain.repository_for(Order).get(outcome["order"].id)
    assert order.status == status
    assert order.payment_status == payment_status
