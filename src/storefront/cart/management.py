"""Cart management: loading, clearing, guest merging and expiry.

The cart is re-validated against the live catalogue whenever it is opened,
so a caller never sees lines for products that have gone away or prices
that have since changed.
"""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from storefront.access.identity import Identity
from storefront.cart.cart import ShoppingCart
from storefront.cart.lookup import find_cart, identity_from, require_cart
from storefront.catalogue.queries import products_by_id
from storefront.domain import storefront
from storefront.shared.clock import as_naive_utc, utcnow
from storefront.shared.records import fetch_all
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class RefreshCart:
    """Open the caller's cart, creating it if needed, and sync it with the catalogue."""

    customer_id = Identifier()
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier()
    session_id = String(max_length=255)


@storefront.command(part_of="ShoppingCart")
class MergeGuestCart:
    """Move a guest session's cart into a registered customer's cart."""

    customer_id = Identifier(required=True)
    guest_session_id = String(required=True, max_length=255)


@storefront.command(part_of="ShoppingCart")
class PurgeExpiredCarts:
    as_of = DateTime()


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartHandler:
    @handle(RefreshCart)
    def refresh_cart(self, command):
        identity = identity_from(command)
        repo = current_domain.repository_for(ShoppingCart)

        cart = find_cart(identity)
        if cart is None:
            cart = ShoppingCart.create(identity)
            repo.add(cart)
            logger.info("Cart created", cart_id=str(cart.id))
            return str(cart.id)

        products = products_by_id(item.product_id for item in cart.items)
        if cart.refresh(products):
            repo.add(cart)
            logger.info("Cart refreshed against catalogue", cart_id=str(cart.id))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = require_cart(identity_from(command))
        cart.clear()
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info("Cart cleared", cart_id=str(cart.id))
        return str(cart.id)

    @handle(MergeGuestCart)
    def merge_guest_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)

        guest_cart = find_cart(Identity.anonymous(command.guest_session_id))
        if guest_cart is None or not guest_cart.items:
            logger.info("No guest cart to merge", guest_session_id=command.guest_session_id)
            return None

        user = Identity.user(command.customer_id)
        cart = find_cart(user) or ShoppingCart.create(user)
        cart.merge_guest_items(guest_cart.snapshot_items(), source_session_id=command.guest_session_id)
        repo.add(cart)
        repo._dao.delete(guest_cart)

        logger.info(
            "Guest cart merged",
            cart_id=str(cart.id),
            guest_cart_id=str(guest_cart.id),
            items_merged=len(guest_cart.items),
        )
        return str(cart.id)

    @handle(PurgeExpiredCarts)
    def purge_expired_carts(self, command):
        """Delete every cart past its expiry; returns how many were removed."""
        as_of = as_naive_utc(command.as_of) or utcnow()
        repo = current_domain.repository_for(ShoppingCart)

        removed = 0
        for cart in fetch_all(repo):
            if cart.is_expired(as_of):
                repo._dao.delete(cart)
                removed += 1

        logger.info("Expired carts purged", removed=removed)
        return removed
