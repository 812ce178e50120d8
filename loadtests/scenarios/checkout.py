"""Checkout load test scenarios.

Two stateful SequentialTaskSet journeys:

- ``CheckoutJourney``: add items -> checkout -> pay, against a roomy catalogue.
- ``ScarceStockJourney``: many shoppers race to buy a product with a handful
  of units. Most checkouts must fail with 400 insufficient stock; stock must
  never go below zero and the sum of ordered units must equal what was sold.
"""

import random
import threading

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import (
    ADMIN_HEADERS,
    cart_item_data,
    checkout_data,
    product_data,
    shopper_headers,
)
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import ShopperState

SCARCE_STOCK = 5

_catalogue_lock = threading.Lock()
_catalogue: dict[str, list[str]] = {"roomy": [], "scarce": []}


def scarce_products() -> list[str]:
    return list(_catalogue["scarce"])


def _ensure_catalogue(client):
    """Register the shared products once per load test run."""
    with _catalogue_lock:
        if _catalogue["roomy"]:
            return
        for _ in range(5):
            resp = client.post("/admin/products", json=product_data(), headers=ADMIN_HEADERS, name="POST /admin/products")
            if resp.status_code == 201:
                _catalogue["roomy"].append(resp.json()["id"])
        resp = client.post(
            "/admin/products",
            json=product_data(stock_quantity=SCARCE_STOCK),
            headers=ADMIN_HEADERS,
            name="POST /admin/products",
        )
        if resp.status_code == 201:
            _catalogue["scarce"].append(resp.json()["id"])


class CheckoutJourney(SequentialTaskSet):
    """Add 2 items -> Checkout -> Pay.

    The happy path. Generates StockReserved (x2), OrderPlaced, OrderPaid.
    """

    def on_start(self):
        _ensure_catalogue(self.client)
        self.state = ShopperState(headers=shopper_headers())

    @task
    def add_items(self):
        for product_id in random.sample(_catalogue["roomy"], k=min(2, len(_catalogue["roomy"]))):
            with self.client.post(
                "/cart/items",
                json=cart_item_data(product_id),
                headers=self.state.headers,
                catch_response=True,
                name="POST /cart/items",
            ) as resp:
                if resp.status_code == 201:
                    self.state.item_ids = [item["id"] for item in resp.json()["data"]["items"]]
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                    self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["data"]["id"]
                self.state.order_status = "pending"
            elif resp.status_code == 400:
                # Stock ran out under load; an expected outcome
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def pay(self):
        with self.client.post(
            f"/orders/{self.state.order_id}/pay",
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders/{id}/pay",
        ) as resp:
            if resp.status_code == 200:
                self.state.order_status = "processing"
            else:
                resp.failure(f"Pay failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ScarceStockJourney(SequentialTaskSet):
    """Add the scarce product -> Checkout -> (sometimes) Cancel.

    Cancelling puts units back, so later shoppers may still succeed.
    """

    def on_start(self):
        _ensure_catalogue(self.client)
        self.state = ShopperState(headers=shopper_headers())

    @task
    def add_scarce_item(self):
        if not _catalogue["scarce"]:
            self.interrupt()
        with self.client.post(
            "/cart/items",
            json=cart_item_data(_catalogue["scarce"][0], quantity=random.randint(1, 2)),
            headers=self.state.headers,
            catch_response=True,
            name="POST /cart/items",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Add to cart failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def checkout(self):
        with self.client.post(
            "/orders",
            json=checkout_data(),
            headers=self.state.headers,
            catch_response=True,
            name="POST /orders [scarce]",
        ) as resp:
            if resp.status_code == 201:
                self.state.order_id = resp.json()["data"]["id"]
            elif resp.status_code == 400:
                resp.success()
                self.interrupt()
            else:
                resp.failure(f"Checkout failed: {resp.status_code}: {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def maybe_cancel(self):
        if random.random() < 0.3:
            with self.client.post(
                f"/orders/{self.state.order_id}/cancel",
                headers=self.state.headers,
                catch_response=True,
                name="POST /orders/{id}/cancel",
            ) as resp:
                if resp.status_code != 200:
                    resp.failure(f"Cancel failed: {resp.status_code}: {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class CheckoutShopper(HttpUser):
    tasks = [CheckoutJourney]
    wait_time = between(0.5, 2)


class ScarceStockShopper(HttpUser):
    tasks = [ScarceStockJourney]
    wait_time = between(0.1, 0.5)
