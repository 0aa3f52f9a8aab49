"""Order status changes by staff: commands and handler."""

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
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    note = String(max_length=500)
    tracking = Text()  # JSON: {carrier, tracking_number, tracking_url}
    updated_by = Identifier()


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        order = load_order(command.order_id)
        tracking = json.loads(command.tracking) if isinstance(command.tracking, str) else command.tracking

        previous_status = order.status
        order.update_status(
            status=command.status,
            note=command.note,
            tracking=tracking,
            updated_by=command.updated_by,
        )
        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
        )
        return str(order.id)
