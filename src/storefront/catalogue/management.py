"""Catalogue management: commands and handler for creating, editing and deleting products."""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.shared.errors import NotFoundError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    name: String(required=True, max_length=100)
    price: Float(required=True, min_value=0.0)
    description: Text()
    sku: String(max_length=50)
    slug: String(max_length=120)
    quantity: Integer(default=0, min_value=0)
    track_quantity: Boolean(default=True)
    is_available: Boolean(default=True)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id: Identifier(required=True)
    name: String(max_length=100)
    price: Float(min_value=0.0)
    description: Text()
    sku: String(max_length=50)
    slug: String(max_length=120)
    quantity: Integer(min_value=0)
    track_quantity: Boolean()
    is_available: Boolean()


@storefront.command(part_of="Product")
class DeleteProduct:
    product_id: Identifier(required=True)


def load_product(product_id):
    """Fetch a product or raise ``NotFoundError``."""
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError:
        raise NotFoundError("Product not found") from None


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            name=command.name,
            price=command.price,
            description=command.description,
            sku=command.sku,
            slug=command.slug,
            quantity=command.quantity or 0,
            track_quantity=command.track_quantity if command.track_quantity is not None else True,
            is_available=command.is_available if command.is_available is not None else True,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), name=product.name)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        product.update_details(
            name=command.name,
            price=command.price,
            description=command.description,
            sku=command.sku,
            slug=command.slug,
            quantity=command.quantity,
            track_quantity=command.track_quantity,
            is_available=command.is_available,
        )
        repo.add(product)
        logger.info("Product updated", product_id=str(product.id))
        return str(product.id)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = load_product(command.product_id)
        repo._dao.delete(product)
        logger.info("Product deleted", product_id=str(command.product_id))
