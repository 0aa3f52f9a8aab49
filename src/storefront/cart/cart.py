"""Shopping Cart aggregate: a mutable basket owned by one user or one guest session.

Each line captures the product price at the time it was added. The derived
``item_count`` and ``subtotal`` are recomputed after every change, so the
persisted values always match the lines. Carts live for 30 days from
creation; an expired cart is treated as if it did not exist.
"""

from datetime import timedelta

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import (
    CartCleared,
    CartItemAdded,
    CartItemRemoved,
    CartItemUpdated,
    CartRefreshed,
    CartsMerged,
)
from storefront.domain import storefront
from storefront.shared.clock import as_naive_utc, utcnow
from storefront.shared.errors import InsufficientStockError, NotFoundError

CART_LIFETIME = timedelta(days=30)


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    variant = String(max_length=100)
    price = Float(default=0.0, min_value=0.0)  # Captured when added or last repriced
    added_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier()  # Set for authenticated users
    session_id = String(max_length=255)  # Set for guests
    items = HasMany(CartItem)
    item_count = Integer(default=0)
    subtotal = Float(default=0.0)
    expires_at = DateTime()
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def cart_must_belong_to_exactly_one_identity(self):
        if bool(self.customer_id) == bool(self.session_id):
            raise ValidationError({"cart": ["A cart belongs to exactly one user or one guest session"]})

    @invariant.post
    def one_line_per_product_and_variant(self):
        keys = [(str(i.product_id), i.variant) for i in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["Each product and variant may appear only once"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, identity):
        """Start an empty cart for ``identity``; a user id wins over a session id."""
        now = utcnow()
        if identity.is_authenticated:
            keys = {"customer_id": identity.user_id}
        else:
            keys = {"session_id": identity.session_id}
        return cls(
            **keys,
            item_count=0,
            subtotal=0.0,
            created_at=now,
            updated_at=now,
            expires_at=now + CART_LIFETIME,
        )

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def line_for(self, product_id, variant=None):
        return next(
            (i for i in self.items if str(i.product_id) == str(product_id) and i.variant == variant),
            None,
        )

    def item(self, item_id):
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            raise NotFoundError("Item not found in cart")
        return item

    def is_expired(self, as_of=None):
        if self.expires_at is None:
            return False
        return as_naive_utc(self.expires_at) <= (as_naive_utc(as_of) or utcnow())

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, quantity, variant=None):
        """Add ``quantity`` units of ``product``, or top up the existing line.

        The product must be available and, when its stock is tracked, hold
        enough units for the whole line after the top-up.
        """
        _require_positive(quantity)
        product.ensure_can_sell(quantity)

        existing = self.line_for(product.id, variant)
        now = utcnow()

        if existing:
            new_quantity = existing.quantity + quantity
            if not product.has_stock_for(new_quantity):
                raise InsufficientStockError("Insufficient stock for requested quantity")
            existing.quantity = new_quantity
            existing.price = product.price
            item_id = str(existing.id)
        else:
            item = CartItem(
                product_id=str(product.id),
                quantity=quantity,
                variant=variant,
                price=product.price,
                added_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self._recalculate_totals()
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product.id),
                variant=variant,
                quantity=quantity,
                price=product.price,
            )
        )
        return item_id

    def update_item_quantity(self, item_id, quantity, product):
        """Set a line to ``quantity`` units at the product's live price."""
        _require_positive(quantity)
        item = self.item(item_id)
        if product is None:
            raise NotFoundError("Product not found")
        if not product.has_stock_for(quantity):
            raise InsufficientStockError("Insufficient stock")

        previous_quantity = item.quantity
        item.quantity = quantity
        item.price = product.price
        self._recalculate_totals()
        self.updated_at = utcnow()

        self.raise_(
            CartItemUpdated(
                cart_id=str(self.id),
                item_id=str(item_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                price=product.price,
            )
        )

    def remove_item(self, item_id):
        """Drop a line; removing a line that is not there changes nothing."""
        item = next((i for i in self.items if str(i.id) == str(item_id)), None)
        if item is None:
            return

        self.remove_items(item)
        self._recalculate_totals()
        self.updated_at = utcnow()

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                item_id=str(item_id),
            )
        )

    def clear(self):
        for item in list(self.items):
            self.remove_items(item)
        self._recalculate_totals()
        self.updated_at = utcnow()

        self.raise_(CartCleared(cart_id=str(self.id)))

    # -------------------------------------------------------------------
    # Repricing against the live catalogue
    # -------------------------------------------------------------------
    def refresh(self, products):
        """Drop lines whose product is gone or unavailable and reprice the rest.

        Args:
            products: Mapping of product id (str) to Product for every line.

        Returns:
            True when any line was removed or repriced.
        """
        removed = 0
        repriced = 0
        for item in list(self.items):
            product = products.get(str(item.product_id))
            if product is None or not product.is_available:
                self.remove_items(item)
                removed += 1
            elif item.price != product.price:
                item.price = product.price
                repriced += 1

        if not (removed or repriced):
            return False

        self._recalculate_totals()
        self.updated_at = utcnow()

        self.raise_(
            CartRefreshed(
                cart_id=str(self.id),
                items_removed=removed,
                items_repriced=repriced,
            )
        )
        return True

    # -------------------------------------------------------------------
    # Cart merging (guest → authenticated)
    # -------------------------------------------------------------------
    def merge_guest_items(self, guest_items, source_session_id=None):
        """Fold a guest cart's lines into this cart.

        Matching (product, variant) lines have their quantities summed;
        stock is not re-checked here and is validated again at checkout.

        Args:
            guest_items: List of dicts with product_id, quantity, variant, price.
        """
        now = utcnow()
        for guest_item in guest_items:
            existing = self.line_for(guest_item["product_id"], guest_item.get("variant"))
            if existing:
                existing.quantity += guest_item["quantity"]
            else:
                self.add_items(
                    CartItem(
                        product_id=str(guest_item["product_id"]),
                        quantity=guest_item["quantity"],
                        variant=guest_item.get("variant"),
                        price=guest_item.get("price") or 0.0,
                        added_at=guest_item.get("added_at") or now,
                    )
                )

        self._recalculate_totals()
        self.updated_at = now

        self.raise_(
            CartsMerged(
                cart_id=str(self.id),
                source_session_id=source_session_id,
                items_merged_count=len(guest_items),
            )
        )

    def snapshot_items(self):
        """Plain-dict copy of the lines, for merging and checkout."""
        return [
            {
                "product_id": str(item.product_id),
                "quantity": item.quantity,
                "variant": item.variant,
                "price": item.price,
                "added_at": item.added_at,
            }
            for item in self.items
        ]

    def _recalculate_totals(self):
        self.item_count = sum(item.quantity for item in self.items)
        self.subtotal = round(sum((item.price or 0.0) * item.quantity for item in self.items), 2)


def _require_positive(quantity):
    if quantity is None or quantity < 1:
        raise ValidationError({"quantity": ["Quantity must be at least 1"]})
