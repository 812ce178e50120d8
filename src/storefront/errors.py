"""Error taxonomy for the storefront domain.

``DomainConflict`` covers user-correctable business rule violations (HTTP 400)
and is a Protean ``ValidationError``, so anything that already handles domain
validation failures handles these too. ``AuthorizationError`` is raised when
the acting user may not touch the order (HTTP 403). ``SystemFault`` wraps
infrastructure failures (HTTP 500); its message is safe to show to clients
and the underlying cause travels as ``__cause__``.

Missing aggregates surface as Protean's own ``ObjectNotFoundError`` (HTTP 404).
"""

from protean.exceptions import ValidationError


class DomainConflict(ValidationError):
    """A business rule rejected the operation before anything was mutated."""

    field = "order"

    def __init__(self, message: str):
        self.message = message
        super().__init__({self.field: [message]})

    def __str__(self) -> str:
        return self.message


class NoCart(DomainConflict):
    field = "cart"

    def __init__(self):
        super().__init__("Cart not found")


class EmptyCart(DomainConflict):
    field = "cart"

    def __init__(self):
        super().__init__("Cart is empty")


class NoValidSelection(DomainConflict):
    field = "selected_item_ids"

    def __init__(self):
        super().__init__("No valid items selected for checkout")


class ProductUnavailable(DomainConflict):
    field = "product_id"

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' is no longer available")


class InsufficientStock(DomainConflict):
    field = "stock"

    def __init__(self, product_name: str, available: int):
        self.product_name = product_name
        self.available = available
        super().__init__(f"Insufficient stock for '{product_name}'. Available: {available}")


class AlreadyPaidOrCancelled(DomainConflict):
    field = "payment_status"

    def __init__(self):
        super().__init__("Order already paid or cancelled")


class CannotCancel(DomainConflict):
    field = "status"

    def __init__(self):
        super().__init__("Cannot cancel order in current status")


class AuthorizationError(Exception):
    """The acting user is neither the owner nor an administrator."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        self.message = message
        super().__init__(message)


class SystemFault(Exception):
    """An infrastructure failure; the message never exposes internal detail."""

    default_message = "The request could not be completed. Please try again later."

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class CheckoutFailed(SystemFault):
    default_message = "Failed to create order. Please try again later."


class OrderNumberExhausted(SystemFault):
    default_message = "Could not allocate a unique order number. Please try again later."
