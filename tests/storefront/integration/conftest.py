import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from storefront.api import admin_router, cart_router, order_router, register_error_handlers

ADMIN_HEADERS = {"X-User-Id": "admin-001", "X-User-Role": "admin"}


def _build_app(domain):
    app = FastAPI()

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        with domain.domain_context():
            return await call_next(request)

    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_router)
    register_error_handlers(app)
    return app


@pytest.fixture()
def client(_storefront_domain):
    return TestClient(_build_app(_storefront_domain))


@pytest.fixture()
def lenient_client(_storefront_domain):
    """Client that returns 500 responses instead of re-raising server errors."""
    return TestClient(_build_app(_storefront_domain), raise_server_exceptions=False)


@pytest.fixture()
def product(client):
    """Factory: register a product over HTTP and return its id."""

    def _create(name="Canvas Tote", price=50.0, stock_quantity=10):
        response = client.post(
            "/admin/products",
            json={"name": name, "price": price, "stock_quantity": stock_quantity},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 201
        return response.json()["id"]

    return _create
