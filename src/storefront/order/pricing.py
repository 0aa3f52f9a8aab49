"""Checkout pricing rules."""

from storefront.order.order import OrderPricing

TAX_RATE = 0.08
FREE_SHIPPING_THRESHOLD = 100.0  # Orders strictly above this ship free
FLAT_SHIPPING = 10.0


def price_order(subtotal: float, discount: float = 0.0, currency: str = "USD") -> OrderPricing:
    """Apply tax and shipping to a subtotal.

    >>> price_order(100.0).total
    118.0
    """
    subtotal = round(subtotal, 2)
    tax = round(subtotal * TAX_RATE, 2)
    shipping = 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING
    total = round(subtotal + tax + shipping - discount, 2)
    return OrderPricing(
        subtotal=subtotal,
        tax=tax,
        shipping=shipping,
        discount=discount,
        total=total,
        currency=currency,
    )
