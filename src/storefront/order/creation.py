"""Order creation: placing an order from explicit items or from the cart.

Every product is loaded once, checked, and priced at its live price. The
order, the stock and sales counters, and the deletion of the customer's cart
are written one after another inside the same handler.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.access.identity import Identity
from storefront.cart.cart import ShoppingCart
from storefront.cart.lookup import find_cart
from storefront.catalogue.product import Product
from storefront.catalogue.queries import find_product
from storefront.domain import storefront
from storefront.order.order import Address, Order
from storefront.order.pricing import price_order
from storefront.order.queries import next_order_number
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of {product_id, quantity, variant}
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    payment_method = String(required=True, max_length=50)
    customer_notes = Text()


@storefront.command(part_of="Order")
class CheckoutCart:
    """Place an order for everything in the customer's cart."""

    customer_id = Identifier(required=True)
    shipping_address = Text(required=True)  # JSON: address dict
    billing_address = Text()  # JSON: address dict, defaults to shipping
    payment_method = String(required=True, max_length=50)
    customer_notes = Text()


def _decode(value):
    return json.loads(value) if isinstance(value, str) else value


def _load_lines(items):
    """Validate requested items against the catalogue.

    Returns the priced order lines and the products they touch, keyed by id.
    Requests for the same product are checked against its stock together.
    """
    if not items:
        raise ValidationError({"items": ["Order must contain at least one item"]})

    products = {}
    requested = {}
    for item in items:
        product_id = str(item.get("product_id") or "")
        quantity = item.get("quantity")
        if not isinstance(quantity, int) or quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        if product_id not in products:
            product = find_product(product_id) if product_id else None
            if product is None:
                raise ValidationError({"items": [f"Product {product_id} not found"]})
            products[product_id] = product

        product = products[product_id]
        if not product.is_available:
            raise ValidationError({"items": [f"Product {product.name} is not available"]})

        requested[product_id] = requested.get(product_id, 0) + quantity
        if not product.has_stock_for(requested[product_id]):
            raise ValidationError({"items": [f"Insufficient stock for {product.name}"]})

    lines = [
        {
            "product_id": str(item["product_id"]),
            "name": products[str(item["product_id"])].name,
            "price": products[str(item["product_id"])].price,
            "quantity": item["quantity"],
            "variant": item.get("variant"),
            "sku": products[str(item["product_id"])].sku,
        }
        for item in items
    ]
    return lines, products


def submit_order(customer_id, items, shipping_address, payment_method, billing_address=None, customer_notes=None):
    lines, products = _load_lines(items)
    subtotal = sum(line["price"] * line["quantity"] for line in lines)

    order = Order.create(
        order_number=next_order_number(),
        customer_id=customer_id,
        lines=lines,
        pricing=price_order(subtotal),
        payment_method=payment_method,
        shipping_address=Address(**shipping_address),
        billing_address=Address(**billing_address) if billing_address else None,
        customer_notes=customer_notes,
    )
    current_domain.repository_for(Order).add(order)

    product_repo = current_domain.repository_for(Product)
    for line in lines:
        products[line["product_id"]].record_sale(line["quantity"], line["price"])
    for product in products.values():
        product_repo.add(product)

    cart = find_cart(Identity.user(customer_id))
    if cart is not None:
        current_domain.repository_for(ShoppingCart)._dao.delete(cart)

    logger.info(
        "Order placed",
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(customer_id),
        total=order.pricing.total,
    )
    return str(order.id)


@storefront.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        return submit_order(
            customer_id=command.customer_id,
            items=_decode(command.items),
            shipping_address=_decode(command.shipping_address),
            billing_address=_decode(command.billing_address),
            payment_method=command.payment_method,
            customer_notes=command.customer_notes,
        )

    @handle(CheckoutCart)
    def checkout_cart(self, command):
        cart = find_cart(Identity.user(command.customer_id))
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cart is empty"]})

        return submit_order(
            customer_id=command.customer_id,
            items=cart.snapshot_items(),
            shipping_address=_decode(command.shipping_address),
            billing_address=_decode(command.billing_address),
            payment_method=command.payment_method,
            customer_notes=command.customer_notes,
        )
