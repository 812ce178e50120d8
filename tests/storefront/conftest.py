import os

import pytest


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Run each test inside a domain context and reset stored data afterwards."""
    with _storefront_domain.domain_context():
        yield

        for _, provider in _storefront_domain.providers.items():
            provider._data_reset()

        for _, broker in _storefront_domain.brokers.items():
            broker._data_reset()

        _storefront_domain.event_store.store._data_reset()


@pytest.fixture()
def register_product():
    """Factory: register a product through the domain and return its id."""
    from protean import current_domain

    from storefront.inventory.registration import RegisterProduct

    def _register(name="Widget", price=50.0, stock_quantity=10):
        return current_domain.process(
            RegisterProduct(name=name, price=price, stock_quantity=stock_quantity),
            asynchronous=False,
        )

    return _register


@pytest.fixture()
def add_to_cart():
    """Factory: put a product in a user's cart and return the cart line id."""
    from protean import current_domain

    from storefront.cart.items import AddToCart

    def _add(user_id, product_id, quantity=1):
        return current_domain.process(
            AddToCart(user_id=user_id, product_id=product_id, quantity=quantity),
            asynchronous=False,
        )

    return _add
