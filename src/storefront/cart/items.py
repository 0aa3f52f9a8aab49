"""Cart item management: commands and handler."""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.lookup import find_cart, identity_from, require_cart
from storefront.catalogue.management import load_product
from storefront.catalogue.queries import find_product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    product_id = Identifier(required=True)
    quantity = Integer(default=1)
    variant = String(max_length=100)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    customer_id = Identifier()
    session_id = String(max_length=255)
    item_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier()
    session_id = String(max_length=255)
    item_id = Identifier(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        identity = identity_from(command)
        product = load_product(command.product_id)

        cart = find_cart(identity) or ShoppingCart.create(identity)
        item_id = cart.add_item(
            product,
            quantity=command.quantity,
            variant=command.variant,
        )
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Item added to cart",
            cart_id=str(cart.id),
            item_id=item_id,
            product_id=str(product.id),
            quantity=command.quantity,
        )
        return str(cart.id)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = require_cart(identity_from(command))
        item = cart.item(command.item_id)
        cart.update_item_quantity(
            item_id=command.item_id,
            quantity=command.quantity,
            product=find_product(item.product_id),
        )
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info(
            "Cart item updated",
            cart_id=str(cart.id),
            item_id=str(command.item_id),
            quantity=command.quantity,
        )
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = require_cart(identity_from(command))
        cart.remove_item(command.item_id)
        current_domain.repository_for(ShoppingCart).add(cart)

        logger.info("Cart item removed", cart_id=str(cart.id), item_id=str(command.item_id))
        return str(cart.id)
