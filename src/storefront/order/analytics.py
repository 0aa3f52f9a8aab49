"""Order analytics over a creation-date window."""

from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus
from storefront.order.queries import created_within
from storefront.shared.records import fetch_all


def order_analytics(start=None, end=None):
    """Totals over orders created between ``start`` and ``end`` (both inclusive, both optional)."""
    orders = [o for o in fetch_all(current_domain.repository_for(Order)) if created_within(o, start, end)]
    if not orders:
        return {
            "total_orders": 0,
            "total_revenue": 0.0,
            "average_order_value": 0.0,
            "pending_orders": 0,
            "completed_orders": 0,
        }

    revenue = sum(o.pricing.total for o in orders)
    return {
        "total_orders": len(orders),
        "total_revenue": round(revenue, 2),
        "average_order_value": round(revenue / len(orders), 2),
        "pending_orders": sum(1 for o in orders if o.status == OrderStatus.PENDING.value),
        "completed_orders": sum(1 for o in orders if o.status == OrderStatus.DELIVERED.value),
    }
