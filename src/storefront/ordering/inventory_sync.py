"""Post-commit stock decrement for placed orders.

Runs after the order is committed. Each line is handled on its own: a
failure is logged and reported to monitoring, the remaining lines still get
decremented, and the order itself is never touched. Whatever is missed here
is left to inventory reconciliation.
"""

import json

import structlog
from protean import UnitOfWork
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.monitoring import report_failure
from storefront.ordering.events import OrderPlaced
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class InventorySyncHandler:
    """Takes sold units off the stock ledger once an order exists."""

    @handle(OrderPlaced)
    def decrement_stock(self, event: OrderPlaced) -> None:
        items = json.loads(event.items) if isinstance(event.items, str) else (event.items or [])
        repo = current_domain.repository_for(Product)

        failed = 0
        for item in items:
            product_id = str(item["product_id"])
            try:
                # Own unit of work so a failed commit stays on this line
                with UnitOfWork():
                    product = repo.get(product_id)
                    product.record_sale(item["quantity"], order_number=event.order_number)
                    repo.add(product)
            except Exception as exc:
                failed += 1
                logger.error(
                    "order.stock_update_failed",
                    order_number=event.order_number,
                    product_id=product_id,
                    quantity=item["quantity"],
                    error=str(exc),
                    exc_info=True,
                )
                report_failure(
                    exc,
                    component="order-assembler",
                    operation="update-stock",
                    force=True,
                    order_number=event.order_number,
                    owner_id=str(event.owner_id),
                    product_id=product_id,
                )

        logger.info(
            "order.stock_updated",
            order_number=event.order_number,
            lines=len(items),
            failed=failed,
        )
