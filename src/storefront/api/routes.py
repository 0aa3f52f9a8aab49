"""FastAPI routes for the storefront: cart, orders and products."""

import json

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.access.identity import Identity, Permission
from storefront.api.dependencies import optional_identity, require_permission, require_user
from storefront.api.envelope import api_response
from storefront.api.schemas import (
    AddToCartRequest,
    CancelOrderRequest,
    CheckoutRequest,
    CreateOrderRequest,
    CreateProductRequest,
    MergeCartRequest,
    RecordRefundRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
    UpdatePaymentStatusRequest,
    UpdateProductRequest,
)
from storefront.api.serializers import (
    camelize,
    cart_to_dict,
    order_page_to_dict,
    order_to_dict,
    product_page_to_dict,
    product_to_dict,
)
from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, RemoveFromCart, UpdateCartItem
from storefront.cart.lookup import cart_summary
from storefront.cart.management import ClearCart, MergeGuestCart, RefreshCart
from storefront.catalogue.management import CreateProduct, DeleteProduct, UpdateProduct, load_product
from storefront.catalogue.queries import list_products
from storefront.order.analytics import order_analytics
from storefront.order.cancellation import CancelOrder, RecordRefund
from storefront.order.creation import CheckoutCart, PlaceOrder
from storefront.order.payment import UpdatePaymentStatus
from storefront.order.queries import get_order, load_order, my_orders, search_orders
from storefront.order.status import UpdateOrderStatus
from storefront.shared.clock import parse_timestamp
from storefront.shared.errors import AuthenticationError
from storefront.shared.records import paginate


def _identity_fields(identity: Identity) -> dict:
    return {"customer_id": identity.user_id, "session_id": identity.session_id}


def _load_cart(cart_id):
    return current_domain.repository_for(ShoppingCart).get(cart_id)


def _dump(model):
    return json.dumps(model.model_dump()) if model is not None else None


def _parse_date(value, field):
    try:
        return parse_timestamp(value)
    except ValueError:
        raise ValidationError({field: [f"Invalid date: {value}"]}) from None


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("")
async def get_cart(identity: Identity = Depends(optional_identity)):
    cart_id = current_domain.process(RefreshCart(**_identity_fields(identity)), asynchronous=False)
    return api_response(200, "Cart retrieved successfully", cart_to_dict(_load_cart(cart_id)))


@cart_router.get("/summary")
async def get_cart_summary(identity: Identity = Depends(optional_identity)):
    return api_response(200, "Cart summary retrieved successfully", camelize(cart_summary(identity)))


@cart_router.post("/add")
async def add_to_cart(body: AddToCartRequest, identity: Identity = Depends(optional_identity)):
    command = AddToCart(
        **_identity_fields(identity),
        product_id=body.product_id,
        quantity=body.quantity,
        variant=body.variant,
    )
    cart_id = current_domain.process(command, asynchronous=False)
    return api_response(200, "Item added to cart successfully", cart_to_dict(_load_cart(cart_id)))


@cart_router.put("/item/{item_id}")
async def update_cart_item(item_id: str, body: UpdateCartItemRequest, identity: Identity = Depends(optional_identity)):
    command = UpdateCartItem(
        **_identity_fields(identity),
        item_id=item_id,
        quantity=body.quantity,
    )
    cart_id = current_domain.process(command, asynchronous=False)
    return api_response(200, "Cart item updated successfully", cart_to_dict(_load_cart(cart_id)))


@cart_router.delete("/item/{item_id}")
async def remove_cart_item(item_id: str, identity: Identity = Depends(optional_identity)):
    command = RemoveFromCart(**_identity_fields(identity), item_id=item_id)
    cart_id = current_domain.process(command, asynchronous=False)
    return api_response(200, "Item removed from cart successfully", cart_to_dict(_load_cart(cart_id)))


@cart_router.delete("/clear")
async def clear_cart(identity: Identity = Depends(optional_identity)):
    cart_id = current_domain.process(ClearCart(**_identity_fields(identity)), asynchronous=False)
    return api_response(200, "Cart cleared successfully", cart_to_dict(_load_cart(cart_id)))


@cart_router.post("/merge")
async def merge_cart(body: MergeCartRequest, identity: Identity = Depends(optional_identity)):
    if not identity.is_authenticated:
        raise AuthenticationError("Not authorized, no token")
    if not body.guest_session_id:
        return api_response(200, "No guest cart to merge")

    command = MergeGuestCart(customer_id=identity.user_id, guest_session_id=body.guest_session_id)
    cart_id = current_domain.process(command, asynchronous=False)
    if cart_id is None:
        return api_response(200, "No guest cart to merge")
    return api_response(200, "Carts merged successfully", cart_to_dict(_load_cart(cart_id)))


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("")
async def list_orders(
    page: int = 1,
    limit: int = 20,
    status: str | None = None,
    payment_status: str | None = Query(default=None, alias="paymentStatus"),
    search: str | None = None,
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    sort: str = "-createdAt",
    identity: Identity = Depends(require_permission(Permission.MANAGE_ORDERS)),
):
    result = search_orders(
        identity,
        status=status,
        payment_status=payment_status,
        search=search,
        start=_parse_date(start_date, "start_date"),
        end=_parse_date(end_date, "end_date"),
        page=page,
        limit=limit,
        sort=sort,
    )
    return api_response(200, "Orders retrieved successfully", order_page_to_dict(result))


@order_router.get("/my-orders")
async def list_my_orders(
    page: int = 1,
    limit: int = 10,
    status: str | None = None,
    identity: Identity = Depends(require_user),
):
    result = my_orders(identity, status=status, page=page, limit=limit)
    return api_response(200, "User orders retrieved successfully", order_page_to_dict(result))


@order_router.get("/analytics/summary")
async def get_order_analytics(
    start_date: str | None = Query(default=None, alias="startDate"),
    end_date: str | None = Query(default=None, alias="endDate"),
    identity: Identity = Depends(require_permission(Permission.VIEW_REPORTS)),
):
    summary = order_analytics(
        start=_parse_date(start_date, "start_date"),
        end=_parse_date(end_date, "end_date"),
    )
    return api_response(200, "Order analytics retrieved successfully", camelize(summary))


@order_router.get("/{order_id}")
async def get_order_detail(order_id: str, identity: Identity = Depends(require_user)):
    order = get_order(identity, order_id)
    return api_response(200, "Order retrieved successfully", order_to_dict(order))


@order_router.post("")
async def create_order(body: CreateOrderRequest, identity: Identity = Depends(require_user)):
    command = PlaceOrder(
        customer_id=identity.user_id,
        items=json.dumps([line.model_dump() for line in body.items]),
        shipping_address=_dump(body.shipping_address),
        billing_address=_dump(body.billing_address),
        payment_method=body.payment_method,
        customer_notes=body.customer_notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return api_response(201, "Order created successfully", order_to_dict(load_order(order_id)))


@order_router.post("/checkout")
async def checkout(body: CheckoutRequest, identity: Identity = Depends(require_user)):
    command = CheckoutCart(
        customer_id=identity.user_id,
        shipping_address=_dump(body.shipping_address),
        billing_address=_dump(body.billing_address),
        payment_method=body.payment_method,
        customer_notes=body.customer_notes,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return api_response(201, "Order created successfully", order_to_dict(load_order(order_id)))


@order_router.patch("/{order_id}/status")
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    identity: Identity = Depends(require_permission(Permission.MANAGE_ORDERS)),
):
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        note=body.note,
        tracking=_dump(body.tracking),
        updated_by=identity.user_id,
    )
    current_domain.process(command, asynchronous=False)
    return api_response(200, "Order status updated successfully", order_to_dict(load_order(order_id)))


@order_router.patch("/{order_id}/payment")
async def update_payment_status(
    order_id: str,
    body: UpdatePaymentStatusRequest,
    identity: Identity = Depends(require_permission(Permission.MANAGE_ORDERS)),
):
    command = UpdatePaymentStatus(
        order_id=order_id,
        payment_status=body.payment_status,
        payment_details=_dump(body.payment_details),
        updated_by=identity.user_id,
    )
    current_domain.process(command, asynchronous=False)
    return api_response(200, "Payment status updated successfully", order_to_dict(load_order(order_id)))


@order_router.patch("/{order_id}/cancel")
async def cancel_order(
    order_id: str,
    body: CancelOrderRequest | None = None,
    identity: Identity = Depends(require_user),
):
    command = CancelOrder(
        order_id=order_id,
        reason=body.reason if body else None,
        cancelled_by=identity.user_id,
        canceller_role=identity.role,
    )
    current_domain.process(command, asynchronous=False)
    return api_response(200, "Order cancelled successfully", order_to_dict(load_order(order_id)))


@order_router.post("/{order_id}/refunds")
async def record_refund(
    order_id: str,
    body: RecordRefundRequest,
    identity: Identity = Depends(require_permission(Permission.MANAGE_ORDERS)),
):
    command = RecordRefund(
        order_id=order_id,
        amount=body.amount,
        reason=body.reason,
        transaction_id=body.transaction_id,
        recorded_by=identity.user_id,
    )
    current_domain.process(command, asynchronous=False)
    return api_response(201, "Refund recorded successfully", order_to_dict(load_order(order_id)))


# ---------------------------------------------------------------------------
# Product Router
# ---------------------------------------------------------------------------
product_router = APIRouter(prefix="/products", tags=["products"])


@product_router.get("")
async def get_products(
    page: int = 1,
    limit: int = 12,
    available: bool | None = None,
    search: str | None = None,
    min_price: float | None = Query(default=None, alias="minPrice"),
    max_price: float | None = Query(default=None, alias="maxPrice"),
):
    products = list_products(available=available, search=search, min_price=min_price, max_price=max_price)
    return api_response(200, "Products retrieved successfully", product_page_to_dict(paginate(products, page, limit)))


@product_router.get("/{product_id}")
async def get_product(product_id: str):
    return api_response(200, "Product retrieved successfully", product_to_dict(load_product(product_id)))


@product_router.post("")
async def create_product(
    body: CreateProductRequest,
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    product_id = current_domain.process(CreateProduct(**body.model_dump()), asynchronous=False)
    return api_response(201, "Product created successfully", product_to_dict(load_product(product_id)))


@product_router.put("/{product_id}")
async def update_product(
    product_id: str,
    body: UpdateProductRequest,
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    command = UpdateProduct(product_id=product_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return api_response(200, "Product updated successfully", product_to_dict(load_product(product_id)))


@product_router.delete("/{product_id}")
async def delete_product(
    product_id: str,
    identity: Identity = Depends(require_permission(Permission.MANAGE_PRODUCTS)),
):
    current_domain.process(DeleteProduct(product_id=product_id), asynchronous=False)
    return api_response(200, "Product deleted successfully")
