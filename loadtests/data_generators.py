"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that pass the API's Pydantic request
schemas (shipping phone at most 20 characters, known payment methods).
"""

import random
import uuid

from faker import Faker

fake = Faker()

ADMIN_HEADERS = {"X-User-Id": "loadtest-admin", "X-User-Role": "admin"}

PAYMENT_METHODS = ["bank_transfer", "e_wallet", "cod"]


def shopper_headers() -> dict:
    """A fresh simulated customer, identified the way the gateway forwards users."""
    return {"X-User-Id": f"LT-{uuid.uuid4().hex[:12]}", "X-User-Role": "user"}


def valid_phone() -> str:
    area = random.randint(200, 999)
    prefix = random.randint(200, 999)
    line = random.randint(1000, 9999)
    return f"+1-{area}-{prefix}-{line}"


def product_data(stock_quantity: int | None = None) -> dict:
    return {
        "name": f"{fake.color_name()} {fake.word().title()} {uuid.uuid4().hex[:4]}",
        "price": round(random.uniform(5, 200), 2),
        "stock_quantity": stock_quantity if stock_quantity is not None else random.randint(50, 500),
    }


def cart_item_data(product_id: str, quantity: int | None = None) -> dict:
    return {"product_id": product_id, "quantity": quantity or random.randint(1, 3)}


def checkout_data(selected_item_ids: list[str] | None = None) -> dict:
    payload = {
        "shipping_name": fake.name()[:255],
        "shipping_phone": valid_phone(),
        "shipping_address": fake.address().replace("\n", ", "),
        "payment_method": random.choice(PAYMENT_METHODS),
        "notes": random.choice([None, fake.sentence(nb_words=6)]),
    }
    if selected_item_ids:
        payload["selected_item_ids"] = selected_item_ids
    return payload
