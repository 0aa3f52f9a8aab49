"""Order aggregate: the immutable record of a checkout and its lifecycle.

Lines copy the product name, price and SKU at checkout, so later catalogue
changes never alter an order. Pricing is computed once at creation and
never recomputed.

Lifecycle:
    pending → confirmed → processing → shipped → delivered
    cancelled (from anything except shipped, delivered, cancelled)
    refunded (set through status or payment changes)

Every status change appends exactly one timeline entry; confirming a pending
order through a successful payment appends a second one.
"""

from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.order.events import (
    OrderCancelled,
    OrderPlaced,
    OrderStatusChanged,
    PaymentStatusChanged,
    RefundRecorded,
)
from storefront.shared.clock import utcnow
from storefront.shared.errors import InvalidStateError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(Enum):
    CREDIT_CARD = "credit_card"
    DEBIT_CARD = "debit_card"
    PAYPAL = "paypal"
    STRIPE = "stripe"
    CASH_ON_DELIVERY = "cash_on_delivery"


class FulfillmentStatus(Enum):
    UNFULFILLED = "unfulfilled"
    PARTIAL = "partial"
    FULFILLED = "fulfilled"


# States from which an order can no longer be cancelled
_NON_CANCELLABLE_STATES = {
    OrderStatus.SHIPPED.value,
    OrderStatus.DELIVERED.value,
    OrderStatus.CANCELLED.value,
}

# Reaching these marks every line as fulfilled
_FULFILLED_STATES = {OrderStatus.SHIPPED.value, OrderStatus.DELIVERED.value}

# Payment states that carry captured money
_REFUNDABLE_PAYMENT_STATES = {PaymentStatus.PAID.value, PaymentStatus.PARTIALLY_REFUNDED.value}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class Address:
    """A shipping or billing address captured at checkout time."""

    first_name = String(max_length=100)
    last_name = String(max_length=100)
    company = String(max_length=255)
    address1 = String(max_length=255)
    address2 = String(max_length=255)
    city = String(max_length=100)
    state = String(max_length=100)
    postal_code = String(max_length=20)
    country = String(max_length=100)
    phone = String(max_length=50)


@storefront.value_object(part_of="Order")
class PaymentDetails:
    transaction_id = String(max_length=255)
    payment_intent_id = String(max_length=255)
    last4 = String(max_length=4)
    brand = String(max_length=50)


@storefront.value_object(part_of="Order")
class Tracking:
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=500)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary of an order, locked at checkout."""

    subtotal = Float(default=0.0)
    tax = Float(default=0.0)
    shipping = Float(default=0.0)
    discount = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default="USD")

    @invariant.post
    def total_must_match_components(self):
        expected = self.subtotal + self.tax + self.shipping - self.discount
        if abs(self.total - expected) > 0.005:
            raise ValidationError({"total": ["Total must equal subtotal + tax + shipping - discount"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased line with the product's name, price and SKU copied at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    variant = String(max_length=100)
    sku = String(max_length=50)


@storefront.entity(part_of="Order")
class TimelineEntry:
    sequence = Integer(required=True)  # Position in the append-only history
    status = String(required=True, max_length=50)
    note = String(max_length=500)
    timestamp = DateTime(required=True)
    updated_by = Identifier()


@storefront.entity(part_of="Order")
class Refund:
    amount = Float(required=True)
    reason = String(max_length=500)
    refunded_at = DateTime(required=True)
    transaction_id = String(max_length=255)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    items = HasMany(OrderItem)
    pricing = ValueObject(OrderPricing)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, required=True)
    payment_details = ValueObject(PaymentDetails)
    shipping_address = ValueObject(Address, required=True)
    billing_address = ValueObject(Address)
    tracking = ValueObject(Tracking)
    notes = Text()
    customer_notes = Text()
    fulfillment_status = String(choices=FulfillmentStatus, default=FulfillmentStatus.UNFULFILLED.value)
    timeline = HasMany(TimelineEntry)
    refunds = HasMany(Refund)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["Order must contain at least one item"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        order_number,
        customer_id,
        lines,
        pricing,
        payment_method,
        shipping_address,
        billing_address=None,
        customer_notes=None,
    ):
        """Create a pending order from checkout data.

        Args:
            order_number: Human-facing number assigned by the caller.
            customer_id: The customer placing the order.
            lines: List of dicts with product_id, name, price, quantity,
                   variant and sku, already priced against the catalogue.
            pricing: OrderPricing for the whole order.
            payment_method: One of ``PaymentMethod``.
            shipping_address: Address the order ships to.
            billing_address: Defaults to the shipping address.
        """
        now = utcnow()
        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            items=[OrderItem(**line) for line in lines],
            pricing=pricing,
            payment_method=payment_method,
            shipping_address=shipping_address,
            billing_address=billing_address or shipping_address,
            customer_notes=customer_notes,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            fulfillment_status=FulfillmentStatus.UNFULFILLED.value,
            created_at=now,
            updated_at=now,
        )
        order._append_timeline(OrderStatus.PENDING.value, "Order created", customer_id, now)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                item_count=sum(line["quantity"] for line in lines),
                total=pricing.total,
                currency=pricing.currency,
                payment_method=payment_method,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def is_cancellable(self):
        return self.status not in _NON_CANCELLABLE_STATES

    @property
    def refunded_total(self):
        return round(sum(refund.amount for refund in self.refunds), 2)

    def ordered_timeline(self):
        return sorted(self.timeline, key=lambda entry: entry.sequence)

    def _append_timeline(self, status, note, updated_by=None, timestamp=None):
        self.add_timeline(
            TimelineEntry(
                sequence=len(self.timeline) + 1,
                status=status,
                note=note,
                timestamp=timestamp or utcnow(),
                updated_by=str(updated_by) if updated_by else None,
            )
        )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, status, note=None, tracking=None, updated_by=None):
        """Move the order to ``status``, recording tracking details when given.

        Any status may be set except cancelling an order that is shipped,
        delivered or already cancelled.
        """
        if status not in {s.value for s in OrderStatus}:
            raise ValidationError({"status": [f"Invalid status: {status}"]})
        if status == OrderStatus.CANCELLED.value and not self.is_cancellable:
            raise InvalidStateError("Order cannot be cancelled")

        previous_status = self.status
        now = utcnow()
        self.status = status
        if tracking:
            self.tracking = Tracking(**tracking)
        if status in _FULFILLED_STATES:
            self.fulfillment_status = FulfillmentStatus.FULFILLED.value
        self.updated_at = now

        note = note or f"Order status updated to {status}"
        self._append_timeline(status, note, updated_by, now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                previous_status=previous_status,
                new_status=status,
                note=note,
                changed_by=str(updated_by) if updated_by else None,
            )
        )

    def update_payment_status(self, payment_status, payment_details=None, updated_by=None):
        """Record a payment status change; a payment on a pending order confirms it."""
        if payment_status not in {s.value for s in PaymentStatus}:
            raise ValidationError({"payment_status": [f"Invalid payment status: {payment_status}"]})

        previous_payment_status = self.payment_status
        now = utcnow()
        self.payment_status = payment_status
        if payment_details:
            current = self.payment_details.to_dict() if self.payment_details else {}
            merged = {**current, **{k: v for k, v in payment_details.items() if v is not None}}
            self.payment_details = PaymentDetails(**merged)
        self.updated_at = now

        self._append_timeline(self.status, f"Payment status updated to {payment_status}", updated_by, now)

        auto_confirmed = payment_status == PaymentStatus.PAID.value and self.status == OrderStatus.PENDING.value
        if auto_confirmed:
            self.status = OrderStatus.CONFIRMED.value
            self._append_timeline(
                OrderStatus.CONFIRMED.value,
                "Order confirmed after successful payment",
                updated_by,
                utcnow(),
            )

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                previous_payment_status=previous_payment_status,
                new_payment_status=payment_status,
                auto_confirmed=auto_confirmed,
                changed_by=str(updated_by) if updated_by else None,
            )
        )

    def cancel(self, reason=None, cancelled_by=None):
        """Cancel the order. Restoring stock is the caller's job."""
        if not self.is_cancellable:
            raise InvalidStateError("Order cannot be cancelled")

        previous_status = self.status
        now = utcnow()
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now
        self._append_timeline(OrderStatus.CANCELLED.value, reason or "Order cancelled", cancelled_by, now)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous_status,
                reason=reason,
                cancelled_by=str(cancelled_by) if cancelled_by else None,
                cancelled_at=now,
            )
        )

    def record_refund(self, amount, reason=None, transaction_id=None, recorded_by=None):
        """Record money returned to the customer.

        Refunds accumulate up to the order total; the payment status becomes
        ``refunded`` once the total is reached and ``partially_refunded`` before.
        """
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Refund amount must be greater than zero"]})
        if self.payment_status not in _REFUNDABLE_PAYMENT_STATES:
            raise InvalidStateError("Order has no captured payment to refund")

        order_total = self.pricing.total
        refunded_total = round(self.refunded_total + amount, 2)
        if refunded_total > order_total + 0.005:
            raise ValidationError({"amount": ["Refunds cannot exceed the order total"]})

        now = utcnow()
        refund = Refund(amount=amount, reason=reason, refunded_at=now, transaction_id=transaction_id)
        self.add_refunds(refund)

        fully_refunded = abs(order_total - refunded_total) <= 0.005
        self.payment_status = (
            PaymentStatus.REFUNDED.value if fully_refunded else PaymentStatus.PARTIALLY_REFUNDED.value
        )
        self.updated_at = now
        self._append_timeline(self.status, reason or f"Refund of {amount:.2f} recorded", recorded_by, now)

        self.raise_(
            RefundRecorded(
                order_id=str(self.id),
                refund_id=str(refund.id),
                amount=amount,
                refunded_total=refunded_total,
                payment_status=self.payment_status,
                reason=reason,
                transaction_id=transaction_id,
            )
        )
        return refund
