"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order; stock has been committed for every line."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True)
    customer_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    currency = String(max_length=3, default="USD")
    payment_method = String(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String()
    changed_by = Identifier()


@storefront.event(part_of="Order")
class PaymentStatusChanged:
    """The payment status moved; ``auto_confirmed`` marks a pending order confirmed by payment."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_payment_status = String(required=True)
    new_payment_status = String(required=True)
    auto_confirmed = Boolean(default=False)
    changed_by = Identifier()


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    reason = String()
    cancelled_by = Identifier()
    cancelled_at = DateTime(required=True)


@storefront.event(part_of="Order")
class RefundRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    refund_id = Identifier(required=True)
    amount = Float(required=True)
    refunded_total = Float(required=True)
    payment_status = String(required=True)
    reason = String()
    transaction_id = String()
