"""Stock accounting for the scarce-product contention run."""


def units_held(orders, product_id) -> int:
    """Units of ``product_id`` sitting in orders that still hold their stock.

    Cancelled orders give their units back, so they are not counted.
    """
    return sum(
        item["quantity"]
        for order in orders
        if order["status"] != "cancelled"
        for item in order["items"]
        if item["product_id"] == product_id
    )


def is_conserved(initial_stock, on_shelf, held) -> bool:
    """Every unit is either on the shelf or in a live order."""
    return on_shelf >= 0 and on_shelf + held == initial_stock
