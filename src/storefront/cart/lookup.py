"""Locating the cart that belongs to a caller."""

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.access.identity import Identity
from storefront.cart.cart import ShoppingCart
from storefront.shared.errors import NotFoundError
from storefront.shared.records import fetch_all
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def identity_from(command) -> Identity:
    """Build the caller identity carried by a cart command."""
    if command.customer_id:
        return Identity.user(command.customer_id, session_id=command.session_id)
    if command.session_id:
        return Identity.anonymous(command.session_id)
    raise ValidationError({"identity": ["A user or a guest session id is required"]})


def find_cart(identity: Identity):
    """Return the caller's live cart, or ``None``.

    Authenticated callers are matched on their user id only; guests on their
    session id. An expired cart is deleted and reported as missing.
    """
    repo = current_domain.repository_for(ShoppingCart)
    if identity.is_authenticated:
        matches = fetch_all(repo, customer_id=identity.user_id)
    elif identity.session_id:
        matches = fetch_all(repo, session_id=identity.session_id)
    else:
        return None

    if not matches:
        return None

    cart = repo.get(matches[0].id)
    if cart.is_expired():
        logger.info("Expired cart discarded", cart_id=str(cart.id))
        repo._dao.delete(cart)
        return None
    return cart


def require_cart(identity: Identity):
    cart = find_cart(identity)
    if cart is None:
        raise NotFoundError("Cart not found")
    return cart


def cart_summary(identity: Identity) -> dict:
    """Item count and subtotal for the caller; zeros when there is no cart."""
    cart = find_cart(identity)
    if cart is None:
        return {"item_count": 0, "subtotal": 0.0}
    return {"item_count": cart.item_count, "subtotal": cart.subtotal}
