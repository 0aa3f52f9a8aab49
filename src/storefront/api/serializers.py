"""Aggregate to wire-format conversion (camelCase keys)."""

from pydantic.alias_generators import to_camel

from storefront.catalogue.queries import products_by_id


def camelize(value):
    if isinstance(value, dict):
        return {to_camel(key): camelize(item) for key, item in value.items()}
    if isinstance(value, list):
        return [camelize(item) for item in value]
    return value


def _value_object(vo):
    return vo.to_dict() if vo is not None else None


def _product_display(product):
    if product is None:
        return None
    return {
        "id": str(product.id),
        "name": product.name,
        "slug": product.slug,
        "price": product.price,
        "is_available": product.is_available,
    }


def product_to_dict(product):
    return camelize(
        {
            "id": str(product.id),
            "name": product.name,
            "slug": product.slug,
            "sku": product.sku,
            "description": product.description,
            "price": product.price,
            "quantity": product.quantity,
            "track_quantity": product.track_quantity,
            "is_available": product.is_available,
            "units_sold": product.units_sold,
            "revenue": product.revenue,
            "created_at": product.created_at,
            "updated_at": product.updated_at,
        }
    )


def cart_to_dict(cart):
    products = products_by_id(item.product_id for item in cart.items)
    return camelize(
        {
            "id": str(cart.id),
            "customer_id": cart.customer_id,
            "session_id": cart.session_id,
            "items": [
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "product": _product_display(products.get(str(item.product_id))),
                    "quantity": item.quantity,
                    "variant": item.variant,
                    "price": item.price,
                    "added_at": item.added_at,
                }
                for item in sorted(cart.items, key=lambda i: i.added_at)
            ],
            "item_count": cart.item_count,
            "subtotal": cart.subtotal,
            "expires_at": cart.expires_at,
            "created_at": cart.created_at,
            "updated_at": cart.updated_at,
        }
    )


def order_to_dict(order):
    products = products_by_id(item.product_id for item in order.items)
    pricing = order.pricing
    return camelize(
        {
            "id": str(order.id),
            "order_number": order.order_number,
            "customer_id": str(order.customer_id),
            "items": [
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "product": _product_display(products.get(str(item.product_id))),
                    "name": item.name,
                    "price": item.price,
                    "quantity": item.quantity,
                    "variant": item.variant,
                    "sku": item.sku,
                }
                for item in order.items
            ],
            "subtotal": pricing.subtotal,
            "tax": pricing.tax,
            "shipping": pricing.shipping,
            "discount": pricing.discount,
            "total": pricing.total,
            "currency": pricing.currency,
            "status": order.status,
            "payment_status": order.payment_status,
            "payment_method": order.payment_method,
            "payment_details": _value_object(order.payment_details),
            "shipping_address": _value_object(order.shipping_address),
            "billing_address": _value_object(order.billing_address),
            "tracking": _value_object(order.tracking),
            "notes": order.notes,
            "customer_notes": order.customer_notes,
            "fulfillment_status": order.fulfillment_status,
            "timeline": [
                {
                    "status": entry.status,
                    "note": entry.note,
                    "timestamp": entry.timestamp,
                    "updated_by": entry.updated_by,
                }
                for entry in order.ordered_timeline()
            ],
            "refunds": [
                {
                    "id": str(refund.id),
                    "amount": refund.amount,
                    "reason": refund.reason,
                    "refunded_at": refund.refunded_at,
                    "transaction_id": refund.transaction_id,
                }
                for refund in sorted(order.refunds, key=lambda r: r.refunded_at)
            ],
            "created_at": order.created_at,
            "updated_at": order.updated_at,
        }
    )


def order_page_to_dict(page):
    return camelize({**page, "docs": []}) | {"docs": [order_to_dict(order) for order in page["docs"]]}


def product_page_to_dict(page):
    return camelize({**page, "docs": []}) | {"docs": [product_to_dict(product) for product in page["docs"]]}
