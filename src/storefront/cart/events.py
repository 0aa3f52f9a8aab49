"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or an existing line was topped up."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant = String()
    quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemUpdated:
    """The quantity of a cart line was overwritten."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    price = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    __version__ = 1

    cart_id = Identifier(required=True)


@storefront.event(part_of="ShoppingCart")
class CartRefreshed:
    """Lines were dropped or repriced to match the live catalogue."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(default=0)
    items_repriced = Integer(default=0)


@storefront.event(part_of="ShoppingCart")
class CartsMerged:
    """A guest cart's items were merged into a registered customer's cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    source_session_id = String()
    items_merged_count = Integer(required=True)
