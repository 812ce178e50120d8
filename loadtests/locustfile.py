"""Storefront Load Testing: Locust entry point.

Run specific scenarios with Locust's class selection.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py

    # Many shoppers racing for the same scarce product:
    locust -f loadtests/locustfile.py ScarceStockShopper

    # Headless (CI mode):
    locust -f loadtests/locustfile.py ScarceStockShopper --headless \
           -u 50 -r 5 -t 120s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.data_generators import ADMIN_HEADERS
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.stock import is_conserved, units_held
from loadtests.scenarios.checkout import CheckoutShopper, ScarceStockShopper  # noqa: F401
from loadtests.scenarios.checkout import SCARCE_STOCK, scarce_products

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request.

    Expected business outcomes (400 insufficient stock) are logged at INFO so
    the contention rate stays visible without drowning real failures.
    """
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code == 400:
        logger.info("[400] %s %s: %s", request_type, name, extract_error_detail(response))
    elif response is not None and response.status_code >= 400:
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, extract_error_detail(response))


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    """Log a marker when load test begins."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Check stock conservation on the contended products and report order statistics.

    Cancelled orders give their units back, so every scarce unit must be either
    on the shelf or in a live order. Anything else is a lost update.
    """
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        for product_id in scarce_products():
            product = requests.get(
                f"{environment.host}/admin/products/{product_id}", headers=ADMIN_HEADERS, timeout=5
            ).json()
            orders = requests.get(f"{environment.host}/admin/orders", headers=ADMIN_HEADERS, timeout=10).json()["data"]
            held = units_held(orders, product_id)
            on_shelf = product["stock_quantity"]
            marker = "OK" if is_conserved(SCARCE_STOCK, on_shelf, held) else "LOST UPDATE"
            print(f"  [{marker}] {product['name']}: stock {on_shelf} + ordered {held} (started with {SCARCE_STOCK})")

        stats = requests.get(f"{environment.host}/admin/orders/stats", headers=ADMIN_HEADERS, timeout=5).json()
        print("\n[LOADTEST] Order statistics:")
        for key, value in stats.items():
            print(f"  {key}: {value}")
        print()
    except Exception as e:
        print(f"[LOADTEST] Could not fetch final stock: {e}\n")
