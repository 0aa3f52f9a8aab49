"""Payment status changes: command and handler."""

import json

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order
from storefront.order.queries import load_order
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    order_id = Identifier(required=True)
    payment_status = String(required=True, max_length=50)
    payment_details = Text()  # JSON: {transaction_id, payment_intent_id, last4, brand}
    updated_by = Identifier()


@storefront.command_handler(part_of=Order)
class PaymentStatusHandler:
    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        order = load_order(command.order_id)
        payment_details = (
            json.loads(command.payment_details)
            if isinstance(command.payment_details, str)
            else command.payment_details
        )

        order.update_payment_status(
            payment_status=command.payment_status,
            payment_details=payment_details,
            updated_by=command.updated_by,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Payment status updated",
            order_id=str(order.id),
            payment_status=order.payment_status,
            status=order.status,
        )
        return str(order.id)
