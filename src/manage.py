"""Storefront database management CLI.

Creates and drops the database schema and seeds products with opening stock.

Usage:
    python src/manage.py setup-db                        # Create all tables
    python src/manage.py drop-db                         # Drop all tables
    python src/manage.py seed-products                   # Register the sample catalogue
    python src/manage.py seed-products --file items.json # Register products from a JSON list
"""

import argparse
import json
import sys

SAMPLE_PRODUCTS = [
    {"name": "Canvas Tote Bag", "price": 50.00, "stock_quantity": 25},
    {"name": "Ceramic Mug", "price": 30.00, "stock_quantity": 40},
    {"name": "Linen Notebook", "price": 12.50, "stock_quantity": 100},
    {"name": "Limited Edition Print", "price": 120.00, "stock_quantity": 5},
]


def _initialized_domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_database():
    from storefront.utils.db import setup_db

    print("Initializing storefront domain...")
    domain = _initialized_domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from storefront.utils.db import drop_db

    print("Initializing storefront domain...")
    domain = _initialized_domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def seed_products(path=None):
    """Register products through the RegisterProduct command."""
    from protean.utils.globals import current_domain

    from storefront.inventory.registration import RegisterProduct

    products = SAMPLE_PRODUCTS
    if path:
        with open(path, encoding="utf-8") as handle:
            products = json.load(handle)

    domain = _initialized_domain()
    with domain.domain_context():
        for data in products:
            product_id = current_domain.process(
                RegisterProduct(
                    name=data["name"],
                    price=data["price"],
                    stock_quantity=data.get("stock_quantity", 0),
                ),
                asynchronous=False,
            )
            print(f"  {product_id}  {data['name']}  (stock: {data.get('stock_quantity', 0)})")

    print(f"Seeded {len(products)} products.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-products", help="Register products with opening stock")
    seed_parser.add_argument(
        "--file",
        help="JSON file holding a list of {name, price, stock_quantity} objects (default: sample catalogue)",
    )

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-products":
        seed_products(args.file)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
