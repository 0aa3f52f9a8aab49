"""Domain events for the Product aggregate."""

from protean.fields import Boolean, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductCreated:
    """A new product was added to the catalogue."""

    __version__ = 1

    product_id: Identifier(required=True)
    name: String(required=True)
    price: Float(required=True)
    quantity: Integer()


@storefront.event(part_of="Product")
class ProductUpdated:
    """Catalogue management changed a product's details."""

    __version__ = 1

    product_id: Identifier(required=True)
    price: Float()
    quantity: Integer()
    is_available: Boolean()


@storefront.event(part_of="Product")
class ProductSaleRecorded:
    """Units were sold through a placed order."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    unit_price: Float(required=True)
    remaining_quantity: Integer()


@storefront.event(part_of="Product")
class ProductSaleReversed:
    """Units of a cancelled order went back into stock."""

    __version__ = 1

    product_id: Identifier(required=True)
    quantity: Integer(required=True)
    unit_price: Float(required=True)
    remaining_quantity: Integer()
