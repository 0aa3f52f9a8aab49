import json

import pytest
from protean import current_domain

from storefront.order.creation import PlaceOrder
from storefront.order.order import Order


@pytest.fixture()
def place_order(make_product, shipping_address):
    """Place an order for ``quantity`` units of a fresh product and return (order, product)."""

    def _place(customer_id="user-001", price=50.0, quantity=2, stock=10):
        product = make_product(price=price, quantity=stock)
        order_id = current_domain.process(
            PlaceOrder(
                customer_id=customer_id,
                items=json.dumps([{"product_id": str(product.id), "quantity": quantity}]),
                shipping_address=json.dumps(shipping_address),
                payment_method="credit_card",
            ),
            asynchronous=False,
        )
        return current_domain.repository_for(Order).get(order_id), product

    return _place
