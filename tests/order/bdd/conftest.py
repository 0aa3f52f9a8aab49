"""Shared BDD fixtures and step definitions for orders."""

import pytest
from pytest_bdd import given, parsers, then

from storefront.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
    RefundRecorded,
)
from storefront.order.order import Address, Order
from storefront.order.pricing import price_order

# Map event name strings to classes for dynamic lookup
_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
    "PaymentStatusChanged": PaymentStatusChanged,
    "OrderCancelled": OrderCancelled,
    "RefundRecorded": RefundRecorded,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured domain errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(
    parsers.cfparse("a pending order for {quantity:d} units at {price:f}"),
    target_fixture="order",
)
def pending_order(quantity, price):
    order = Order.create(
        order_number="ORD-1700000000000-0001",
        customer_id="user-001",
        lines=[
            {
                "product_id": "prod-001",
                "name": "Widget",
                "price": price,
                "quantity": quantity,
            }
        ],
        pricing=price_order(price * quantity),
        payment_method="credit_card",
        shipping_address=Address(first_name="Jane", last_name="Doe", city="Springfield", country="US"),
    )
    order._events.clear()
    return order


@given(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    order.update_status(status)
    order._events.clear()


@given("the order is paid")
def order_is_paid(order):
    order.update_payment_status("paid")
    order._events.clear()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_matches(order, status):
    assert order.status == status


@then(parsers.cfparse('the payment status is "{payment_status}"'))
def payment_status_matches(order, payment_status):
    assert order.payment_status == payment_status


@then(parsers.cfparse("a {event_name} event is raised"))
def event_raised(order, event_name):
    event_cls = _EVENT_CLASSES[event_name]
    assert any(isinstance(e, event_cls) for e in order._events)


@then(parsers.cfparse('the timeline ends with "{note}"'))
def timeline_ends_with(order, note):
    assert order.ordered_timeline()[-1].note == note


@then("no event is raised")
def no_event_raised(order):
    assert order._events == []


@then(parsers.cfparse('the action fails with a "{error_type}" error'))
def action_fails(error, error_type):
    assert error["exc"] is not None
    assert type(error["exc"]).__name__ == error_type
