"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

PaymentMethodLiteral = Literal["bank_transfer", "e_wallet", "cod"]


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------
class MessageResponse(BaseModel):
    message: str


class ProductSummary(BaseModel):
    id: str
    name: str
    price: float
    stock_quantity: int


# ---------------------------------------------------------------------------
# Product (admin seeding)
# ---------------------------------------------------------------------------
class RegisterProductRequest(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    price: float = Field(ge=0)
    stock_quantity: int = Field(ge=0, default=0)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    quantity: int = Field(ge=1, default=1)


class UpdateCartQuantityRequest(BaseModel):
    quantity: int = Field(ge=1)


class CartItemResponse(BaseModel):
    id: str
    product_id: str
    product: ProductSummary | None = None
    quantity: int
    subtotal: float


class CartResponse(BaseModel):
    id: str
    items: list[CartItemResponse]
    total: float
    total_items: int


class CartEnvelope(BaseModel):
    message: str
    data: CartResponse


# ---------------------------------------------------------------------------
# Checkout / Orders
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    shipping_name: str = Field(min_length=1, max_length=255)
    shipping_phone: str = Field(min_length=1, max_length=20)
    shipping_address: str = Field(min_length=1)
    payment_method: PaymentMethodLiteral
    notes: str | None = None
    selected_item_ids: list[str] | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "shipping_name": "Jane Doe",
                    "shipping_phone": "+62812345678",
                    "shipping_address": "Jl. Sudirman 1, Jakarta",
                    "payment_method": "bank_transfer",
                    "notes": "Leave at the front desk",
                    "selected_item_ids": None,
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str


class OrderItemResponse(BaseModel):
    id: str
    product_id: str
    product_name: str
    price: float
    quantity: int
    subtotal: float


class OrderResponse(BaseModel):
    id: str
    order_number: str
    user_id: str
    total_amount: float
    status: str
    payment_status: str
    payment_method: str
    shipping_name: str
    shipping_phone: str
    shipping_address: str
    notes: str | None = None
    paid_at: datetime | None = None
    cancelled_at: datetime | None = None
    created_at: datetime | None = None
    items: list[OrderItemResponse]


class OrderEnvelope(BaseModel):
    message: str
    data: OrderResponse


class OrderListResponse(BaseModel):
    data: list[OrderResponse]


class OrderStatsResponse(BaseModel):
    total_orders: int
    pending_orders: int
    processing_orders: int
    shipped_orders: int
    delivered_orders: int
    cancelled_orders: int
    total_revenue: float
    today_orders: int
    today_revenue: float
