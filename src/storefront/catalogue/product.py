"""Product aggregate root: the catalogue entry carts and orders price against."""

import re

from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.domain import storefront
from storefront.shared.clock import utcnow
from storefront.shared.errors import InsufficientStockError, InvalidStateError


def slugify(name: str) -> str:
    return re.sub(r"(^-|-$)", "", re.sub(r"[^a-z0-9]+", "-", name.lower()))


@storefront.aggregate
class Product:
    """A sellable catalogue item with stock and sales counters.

    Catalogue management edits the descriptive fields; the order flow only
    touches ``quantity``, ``units_sold`` and ``revenue``.
    """

    name: String(required=True, max_length=100)
    slug: String(max_length=120)
    sku: String(max_length=50)
    description: Text()
    price: Float(required=True, min_value=0.0)
    quantity: Integer(default=0, min_value=0)
    track_quantity: Boolean(default=True)
    is_available: Boolean(default=True)
    units_sold: Integer(default=0)
    revenue: Float(default=0.0)
    created_at: DateTime()
    updated_at: DateTime()

    @classmethod
    def create(
        cls,
        name,
        price,
        description=None,
        sku=None,
        slug=None,
        quantity=0,
        track_quantity=True,
        is_available=True,
    ):
        from storefront.catalogue.events import ProductCreated

        now = utcnow()
        product = cls(
            name=name,
            slug=slug or slugify(name),
            sku=sku,
            description=description,
            price=price,
            quantity=quantity,
            track_quantity=track_quantity,
            is_available=is_available,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductCreated(
                product_id=str(product.id),
                name=name,
                price=price,
                quantity=quantity,
            )
        )
        return product

    def update_details(self, **changes):
        """Apply a partial update; ``None`` values are ignored."""
        from storefront.catalogue.events import ProductUpdated

        applied = {key: value for key, value in changes.items() if value is not None}
        for key, value in applied.items():
            setattr(self, key, value)
        if "name" in applied and "slug" not in applied:
            self.slug = slugify(self.name)
        self.updated_at = utcnow()

        self.raise_(
            ProductUpdated(
                product_id=str(self.id),
                price=self.price,
                quantity=self.quantity,
                is_available=self.is_available,
            )
        )

    # -------------------------------------------------------------------
    # Stock checks
    # -------------------------------------------------------------------
    def has_stock_for(self, quantity):
        return not self.track_quantity or self.quantity >= quantity

    def ensure_can_sell(self, quantity, message="Insufficient stock"):
        """Raise unless ``quantity`` units could be sold right now."""
        if not self.is_available:
            raise InvalidStateError("Product is not available")
        if not self.has_stock_for(quantity):
            raise InsufficientStockError(message)

    # -------------------------------------------------------------------
    # Sales counters
    # -------------------------------------------------------------------
    def record_sale(self, quantity, unit_price):
        """Take ``quantity`` units out of stock and count them as sold."""
        from storefront.catalogue.events import ProductSaleRecorded

        if self.track_quantity:
            self.quantity -= quantity
        self.units_sold += quantity
        self.revenue = round(self.revenue + quantity * unit_price, 2)
        self.updated_at = utcnow()

        self.raise_(
            ProductSaleRecorded(
                product_id=str(self.id),
                quantity=quantity,
                unit_price=unit_price,
                remaining_quantity=self.quantity,
            )
        )

    def reverse_sale(self, quantity, unit_price):
        """Put ``quantity`` units back in stock, priced as originally sold."""
        from storefront.catalogue.events import ProductSaleReversed

        if self.track_quantity:
            self.quantity += quantity
        self.units_sold -= quantity
        self.revenue = round(self.revenue - quantity * unit_price, 2)
        self.updated_at = utcnow()

        self.raise_(
            ProductSaleReversed(
                product_id=str(self.id),
                quantity=quantity,
                unit_price=unit_price,
                remaining_quantity=self.quantity,
            )
        )
