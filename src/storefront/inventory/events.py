"""Domain events for the Product aggregate's stock ledger."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductRegistered:
    """A product was added to the catalogue with an opening stock count."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    stock_quantity = Integer(required=True)
    registered_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockReserved:
    """Stock was claimed for a checkout."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reserved_at = DateTime(required=True)


@storefront.event(part_of="Product")
class StockRestored:
    """Previously reserved stock was credited back (rollback or cancellation)."""

    __version__ = "v1"

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    restored_at = DateTime(required=True)
