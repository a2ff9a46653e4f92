"""Order and payment status changes: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.order import Order, PaymentStatus
from storefront.ownership import ensure_owner


@storefront.command(part_of="Order")
class ShipOrder:
    owner_id = Identifier(required=True)
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class DeliverOrder:
    owner_id = Identifier(required=True)
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class CancelOrder:
    owner_id = Identifier(required=True)
    order_id = Identifier(required=True)
    reason = String(max_length=200)


@storefront.command(part_of="Order")
class UpdatePaymentStatus:
    owner_id = Identifier(required=True)
    order_id = Identifier(required=True)
    payment_status = String(required=True, choices=PaymentStatus)


def _owned_order(repo, owner_id, order_id) -> Order:
    order = repo.get(order_id)
    ensure_owner("order", order_id, order.owner_id, owner_id)
    return order


@storefront.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(ShipOrder)
    def ship_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _owned_order(repo, command.owner_id, command.order_id)
        order.ship()
        repo.add(order)

    @handle(DeliverOrder)
    def deliver_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _owned_order(repo, command.owner_id, command.order_id)
        order.deliver()
        repo.add(order)

    @handle(CancelOrder)
    def cancel_order(self, command):
        repo = current_domain.repository_for(Order)
        order = _owned_order(repo, command.owner_id, command.order_id)
        order.cancel(command.reason)
        repo.add(order)

    @handle(UpdatePaymentStatus)
    def update_payment_status(self, command):
        repo = current_domain.repository_for(Order)
        order = _owned_order(repo, command.owner_id, command.order_id)
        order.update_payment_status(command.payment_status)
        repo.add(order)
