"""FastAPI routes for the Storefront domain: cart, checkout, orders and admin."""

from fastapi import APIRouter, Depends
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.api.auth import Actor, current_actor, require_admin
from storefront.api.schemas import (
    AddToCartRequest,
    CartEnvelope,
    CartItemResponse,
    CartResponse,
    CheckoutRequest,
    MessageResponse,
    OrderEnvelope,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    OrderStatsResponse,
    ProductSummary,
    RegisterProductRequest,
    UpdateCartQuantityRequest,
    UpdateOrderStatusRequest,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartQuantity
from storefront.checkout.service import CheckoutDetails, CheckoutService
from storefront.errors import AuthorizationError
from storefront.inventory.product import Product
from storefront.inventory.registration import RegisterProduct
from storefront.order.administration import UpdateOrderStatus
from storefront.order.cancellation import CancelOrder
from storefront.order.order import Order
from storefront.order.payment import PayOrder
from storefront.order.statistics import order_statistics
from storefront.utils.money import as_float, line_subtotal, to_money


# ---------------------------------------------------------------------------
# Presenters
# ---------------------------------------------------------------------------
def _product_summary(product) -> ProductSummary:
    return ProductSummary(
        id=str(product.id),
        name=product.name,
        price=product.price,
        stock_quantity=product.stock_quantity or 0,
    )


def _cart_response(cart) -> CartResponse:
    products = current_domain.repository_for(Product)
    items = []
    total = to_money(0)
    for item in cart.items or []:
        try:
            product = products.get(item.product_id)
        except ObjectNotFoundError:
            product = None

        subtotal = line_subtotal(product.unit_price, item.quantity) if product else to_money(0)
        total += subtotal
        items.append(
            CartItemResponse(
                id=str(item.id),
                product_id=str(item.product_id),
                product=_product_summary(product) if product else None,
                quantity=item.quantity,
                subtotal=as_float(subtotal),
            )
        )

    return CartResponse(
        id=str(cart.id),
        items=items,
        total=as_float(total),
        total_items=cart.total_items,
    )


def _user_cart(user_id) -> CartResponse:
    cart = current_domain.repository_for(ShoppingCart).get_or_create_for(user_id)
    return _cart_response(cart)


def _order_response(order) -> OrderResponse:
    return OrderResponse(
        id=str(order.id),
        order_number=order.order_number,
        user_id=str(order.user_id),
        total_amount=order.total_amount,
        status=order.status,
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        shipping_name=order.shipping_name,
        shipping_phone=order.shipping_phone,
        shipping_address=order.shipping_address,
        notes=order.notes,
        paid_at=order.paid_at,
        cancelled_at=order.cancelled_at,
        created_at=order.created_at,
        items=[
            OrderItemResponse(
                id=str(item.id),
                product_id=str(item.product_id),
                product_name=item.product_name,
                price=item.price,
                quantity=item.quantity,
                subtotal=item.subtotal,
            )
            for item in order.items or []
        ],
    )


def _load_order(order_id) -> Order:
    return current_domain.repository_for(Order).get(order_id)


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def view_cart(actor: Actor = Depends(current_actor)) -> CartResponse:
    return _user_cart(actor.user_id)


@cart_router.post("/items", status_code=201, response_model=CartEnvelope)
async def add_cart_item(body: AddToCartRequest, actor: Actor = Depends(current_actor)) -> CartEnvelope:
    command = AddToCart(
        user_id=actor.user_id,
        product_id=body.product_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartEnvelope(message="Product added to cart", data=_user_cart(actor.user_id))


@cart_router.put("/items/{item_id}", response_model=CartEnvelope)
async def update_cart_item(
    item_id: str, body: UpdateCartQuantityRequest, actor: Actor = Depends(current_actor)
) -> CartEnvelope:
    command = UpdateCartQuantity(
        user_id=actor.user_id,
        item_id=item_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartEnvelope(message="Cart updated", data=_user_cart(actor.user_id))


@cart_router.delete("/items/{item_id}", response_model=CartEnvelope)
async def remove_cart_item(item_id: str, actor: Actor = Depends(current_actor)) -> CartEnvelope:
    current_domain.process(RemoveFromCart(user_id=actor.user_id, item_id=item_id), asynchronous=False)
    return CartEnvelope(message="Item removed from cart", data=_user_cart(actor.user_id))


@cart_router.delete("", response_model=MessageResponse)
async def clear_cart(actor: Actor = Depends(current_actor)) -> MessageResponse:
    current_domain.process(ClearCart(user_id=actor.user_id), asynchronous=False)
    return MessageResponse(message="Cart cleared")


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=OrderListResponse)
async def list_my_orders(status: str | None = None, actor: Actor = Depends(current_actor)) -> OrderListResponse:
    orders = current_domain.repository_for(Order).for_user(actor.user_id, status=status)
    return OrderListResponse(data=[_order_response(order) for order in orders])


@order_router.post("", status_code=201, response_model=OrderEnvelope)
async def checkout(body: CheckoutRequest, actor: Actor = Depends(current_actor)) -> OrderEnvelope:
    """Convert the caller's cart, or the selected lines of it, into an order."""
    details = CheckoutDetails(
        shipping_name=body.shipping_name,
        shipping_phone=body.shipping_phone,
        shipping_address=body.shipping_address,
        payment_method=body.payment_method,
        notes=body.notes,
        selected_item_ids=tuple(body.selected_item_ids or ()),
    )
    order = CheckoutService().checkout(actor.user_id, details)
    return OrderEnvelope(message="Order created successfully", data=_order_response(order))


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderResponse:
    order = _load_order(order_id)
    if not (order.is_owned_by(actor.user_id) or actor.is_admin):
        raise AuthorizationError("You do not have permission to view this order")
    return _order_response(order)


@order_router.post("/{order_id}/pay", response_model=OrderEnvelope)
async def pay_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderEnvelope:
    current_domain.process(PayOrder(order_id=order_id, user_id=actor.user_id), asynchronous=False)
    return OrderEnvelope(message="Payment successful", data=_order_response(_load_order(order_id)))


@order_router.post("/{order_id}/cancel", response_model=OrderEnvelope)
async def cancel_order(order_id: str, actor: Actor = Depends(current_actor)) -> OrderEnvelope:
    command = CancelOrder(
        order_id=order_id,
        actor_id=actor.user_id,
        actor_role=actor.role,
    )
    current_domain.process(command, asynchronous=False)
    return OrderEnvelope(message="Order cancelled successfully", data=_order_response(_load_order(order_id)))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@admin_router.get("/orders", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    search: str | None = None,
) -> OrderListResponse:
    orders = current_domain.repository_for(Order).search(
        status=status,
        payment_status=payment_status,
        search=search,
    )
    return OrderListResponse(data=[_order_response(order) for order in orders])


@admin_router.get("/orders/stats", response_model=OrderStatsResponse)
async def order_stats() -> OrderStatsResponse:
    return OrderStatsResponse(**order_statistics())


@admin_router.put("/orders/{order_id}/status", response_model=OrderEnvelope)
async def update_order_status(
    order_id: str, body: UpdateOrderStatusRequest, actor: Actor = Depends(require_admin)
) -> OrderEnvelope:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        actor_id=actor.user_id,
        actor_role=actor.role,
    )
    current_domain.process(command, asynchronous=False)
    return OrderEnvelope(
        message="Order status updated successfully",
        data=_order_response(_load_order(order_id)),
    )


@admin_router.post("/products", status_code=201, response_model=ProductSummary)
async def register_product(body: RegisterProductRequest) -> ProductSummary:
    command = RegisterProduct(
        name=body.name,
        price=body.price,
        stock_quantity=body.stock_quantity,
    )
    product_id = current_domain.process(command, asynchronous=False)
    return _product_summary(current_domain.repository_for(Product).get(product_id))


@admin_router.get("/products/{product_id}", response_model=ProductSummary)
async def get_product(product_id: str) -> ProductSummary:
    return _product_summary(current_domain.repository_for(Product).get(product_id))
