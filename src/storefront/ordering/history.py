"""Order history: per-owner listing of placed orders."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.ordering.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    PaymentStatusChanged,
)
from storefront.ordering.order import Order


@storefront.projection
class OrderHistory:
    order_id = Identifier(identifier=True, required=True)
    owner_id = Identifier(required=True)
    order_number = String(required=True)
    order_status = String(required=True)
    payment_status = String(required=True)
    item_count = Integer(default=0)
    total_amount = Float()
    created_at = DateTime()
    updated_at = DateTime()


@storefront.projector(projector_for=OrderHistory, aggregates=[Order])
class OrderHistoryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderHistory).add(
            OrderHistory(
                order_id=event.order_id,
                owner_id=event.owner_id,
                order_number=event.order_number,
                order_status=event.order_status,
                payment_status=event.payment_status,
                item_count=event.item_count,
                total_amount=event.total_amount,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    def _set_status(self, order_id, changed_at, **changes):
        repo = current_domain.repository_for(OrderHistory)
        entry = repo.get(order_id)
        for field, value in changes.items():
            setattr(entry, field, value)
        entry.updated_at = changed_at
        repo.add(entry)

    @on(OrderShipped)
    def on_order_shipped(self, event):
        self._set_status(event.order_id, event.shipped_at, order_status="Shipped")

    @on(OrderDelivered)
    def on_order_delivered(self, event):
        self._set_status(event.order_id, event.delivered_at, order_status="Delivered")

    @on(OrderCancelled)
    def on_order_cancelled(self, event):
        self._set_status(event.order_id, event.cancelled_at, order_status="Cancelled")

    @on(PaymentStatusChanged)
    def on_payment_status_changed(self, event):
        self._set_status(event.order_id, event.changed_at, payment_status=event.new_status)


def order_history(owner_id, limit=10, page=1) -> dict:
    """One page of an owner's orders, newest first."""
    limit = max(int(limit), 1)
    page = max(int(page), 1)

    result = (
        current_domain.repository_for(OrderHistory)
        ._dao.query.filter(owner_id=str(owner_id))
        .order_by("-created_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "orders": result.items,
        "total": result.total,
        "page": page,
        "limit": limit,
    }
