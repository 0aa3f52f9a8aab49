"""Order cancellation and refunds: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.access.identity import Identity
from storefront.catalogue.product import Product
from storefront.catalogue.queries import products_by_id
from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.queries import load_order
from storefront.shared.errors import ForbiddenError
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    reason = String(max_length=500)
    cancelled_by = Identifier(required=True)
    canceller_role = String(max_length=50)


@storefront.command(part_of="Order")
class RecordRefund:
    order_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String(max_length=500)
    transaction_id = String(max_length=255)
    recorded_by = Identifier()


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)

        caller = Identity.user(command.cancelled_by, role=command.canceller_role)
        if not caller.is_privileged and not caller.owns(order.customer_id):
            raise ForbiddenError("Not authorized to cancel this order")

        order.cancel(reason=command.reason, cancelled_by=command.cancelled_by)
        current_domain.repository_for(Order).add(order)

        # Stock goes back at the price each line was sold for
        products = products_by_id(item.product_id for item in order.items)
        for item in order.items:
            product = products.get(str(item.product_id))
            if product is None:
                logger.warning(
                    "Cancelled order references a deleted product",
                    order_id=str(order.id),
                    product_id=str(item.product_id),
                )
                continue
            product.reverse_sale(item.quantity, item.price)

        product_repo = current_domain.repository_for(Product)
        for product in products.values():
            product_repo.add(product)

        logger.info("Order cancelled", order_id=str(order.id), reason=command.reason)
        return str(order.id)

    @handle(RecordRefund)
    def record_refund(self, command):
        order = load_order(command.order_id)
        refund = order.record_refund(
            amount=command.amount,
            reason=command.reason,
            transaction_id=command.transaction_id,
            recorded_by=command.recorded_by,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Refund recorded",
            order_id=str(order.id),
            refund_id=str(refund.id),
            amount=command.amount,
            payment_status=order.payment_status,
        )
        return str(order.id)
