"""BDD tests for placing orders through the command handler."""

import json

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.catalogue.product import Product
from storefront.order.creation import PlaceOrder
from storefront.order.order import Order

scenarios("features/checkout.feature")


@pytest.fixture()
def catalogue():
    return {}


@pytest.fixture()
def outcome():
    return {"order_id": None, "exc": None}


@given(parsers.cfparse('a product "{name}" priced {price:f} with {quantity:d} in stock'))
def product_in_stock(make_product, catalogue, name, price, quantity):
    catalogue[name] = make_product(name=name, price=price, quantity=quantity)


@when(parsers.cfparse('the customer orders {quantity:d} of "{name}"'))
def customer_orders(catalogue, outcome, shipping_address, quantity, name):
    command = PlaceOrder(
        customer_id="user-001",
        items=json.dumps([{"product_id": str(catalogue[name].id), "quantity": quantity}]),
        shipping_address=json.dumps(shipping_address),
        payment_method="credit_card",
    )
    try:
        outcome["order_id"] = current_domain.process(command, asynchronous=False)
    except ValidationError as exc:
        outcome["exc"] = exc


@then(parsers.cfparse("the order total is {total:f}"))
def order_total(outcome, total):
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert order.pricing.total == pytest.approx(total)


@then(parsers.cfparse('the order is rejected with "{message}"'))
def order_rejected(outcome, message):
    assert outcome["order_id"] is None
    assert message in outcome["exc"].messages["items"]


@then(parsers.cfparse('"{name}" has {quantity:d} in stock'))
def stock_level(catalogue, name, quantity):
    product = current_domain.repository_for(Product).get(catalogue[name].id)
    assert product.quantity == quantity
