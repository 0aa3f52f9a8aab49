"""Read-side helpers over the product catalogue."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.shared.records import fetch_all


def find_product(product_id):
    """Return the product or ``None`` when it does not exist."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        return None


def products_by_id(product_ids):
    """Map each known id to its product; unknown ids are left out."""
    found = {}
    for product_id in {str(pid) for pid in product_ids}:
        product = find_product(product_id)
        if product is not None:
            found[product_id] = product
    return found


def list_products(available=None, search=None, min_price=None, max_price=None):
    """Products matching the filters, newest first.

    ``search`` matches name or description case-insensitively; the price
    bounds are inclusive.
    """
    repo = current_domain.repository_for(Product)
    if available is None:
        products = fetch_all(repo)
    else:
        products = fetch_all(repo, is_available=available)

    if min_price is not None:
        products = [p for p in products if p.price >= min_price]
    if max_price is not None:
        products = [p for p in products if p.price <= max_price]
    if search:
        needle = search.lower()
        products = [
            p for p in products if needle in (p.name or "").lower() or needle in (p.description or "").lower()
        ]

    return sorted(products, key=lambda p: p.created_at or p.updated_at, reverse=True)
