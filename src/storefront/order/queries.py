"""Read-side access to orders: lookups, filtered listings and numbering.

Non-privileged callers only ever see their own orders; a request for
someone else's order is reported as not found.
"""

import time

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.order.order import Order
from storefront.shared.clock import as_naive_utc
from storefront.shared.errors import NotFoundError
from storefront.shared.records import fetch_all, paginate

DEFAULT_SORT = "-created_at"

# Sort keys accepted from clients, in both wire and attribute spelling
_SORT_KEYS = {
    "created_at": lambda o: o.created_at,
    "createdAt": lambda o: o.created_at,
    "updated_at": lambda o: o.updated_at or o.created_at,
    "updatedAt": lambda o: o.updated_at or o.created_at,
    "total": lambda o: o.pricing.total if o.pricing else 0.0,
    "order_number": lambda o: o.order_number,
    "orderNumber": lambda o: o.order_number,
    "status": lambda o: o.status,
}


def load_order(order_id):
    """Fetch an order or raise ``NotFoundError``."""
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise NotFoundError("Order not found") from None


def get_order(identity, order_id):
    order = load_order(order_id)
    if not identity.is_privileged and not identity.owns(order.customer_id):
        raise NotFoundError("Order not found")
    return order


def next_order_number():
    """``ORD-<epoch ms>-<sequence>``, the sequence being the order count plus one."""
    count = len(fetch_all(current_domain.repository_for(Order)))
    return f"ORD-{int(time.time() * 1000)}-{count + 1:04d}"


def _matches_search(order, needle):
    address = order.shipping_address
    haystack = [
        order.order_number,
        address.first_name if address else None,
        address.last_name if address else None,
    ]
    return any(needle in value.lower() for value in haystack if value)


def created_within(order, start, end):
    created_at = as_naive_utc(order.created_at)
    if start and created_at < start:
        return False
    if end and created_at > end:
        return False
    return True


def sort_orders(orders, sort=DEFAULT_SORT):
    sort = sort or DEFAULT_SORT
    descending = sort.startswith("-")
    key = _SORT_KEYS.get(sort.lstrip("-+"))
    if key is None:
        raise ValidationError({"sort": [f"Cannot sort by {sort}"]})
    return sorted(orders, key=key, reverse=descending)


def search_orders(
    identity,
    status=None,
    payment_status=None,
    search=None,
    start=None,
    end=None,
    page=1,
    limit=20,
    sort=DEFAULT_SORT,
):
    """Filter, sort and paginate orders visible to ``identity``."""
    filters = {}
    if status:
        filters["status"] = status
    if payment_status:
        filters["payment_status"] = payment_status
    if not identity.is_privileged:
        filters["customer_id"] = identity.user_id

    orders = fetch_all(current_domain.repository_for(Order), **filters)

    if search:
        needle = search.lower()
        orders = [o for o in orders if _matches_search(o, needle)]
    if start or end:
        orders = [o for o in orders if created_within(o, start, end)]

    return paginate(sort_orders(orders, sort), page, limit)


def my_orders(identity, status=None, page=1, limit=10):
    """The caller's own orders, newest first."""
    filters = {"customer_id": identity.user_id}
    if status:
        filters["status"] = status

    orders = fetch_all(current_domain.repository_for(Order), **filters)
    return paginate(sort_orders(orders), page, limit)
