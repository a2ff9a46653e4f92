"""Cart cleanup driven by catalogue and order events.

Lines for a product disappear from every cart once the product is
deactivated or sold out, and an owner's purchased lines disappear once the
order is placed.
"""

import json

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle

from storefront.cart.cart_item import CartItem
from storefront.catalogue.events import ProductDeactivated, ProductSoldOut
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.monitoring import report_failure
from storefront.ordering.events import OrderPlaced
from storefront.ordering.order import Order

logger = structlog.get_logger(__name__)


def _drop_lines_for_product(product_id, reason) -> int:
    repo = current_domain.repository_for(CartItem)
    lines = repo.lines_for_product(product_id)
    for line in lines:
        repo.delete_line(line)

    if lines:
        logger.info("cart.lines_dropped", product_id=str(product_id), reason=reason, count=len(lines))
    return len(lines)


@storefront.event_handler(part_of=Product)
class ProductAvailabilityCartHandler:
    @handle(ProductDeactivated)
    def on_product_deactivated(self, event: ProductDeactivated) -> None:
        _drop_lines_for_product(event.product_id, reason="deactivated")

    @handle(ProductSoldOut)
    def on_product_sold_out(self, event: ProductSoldOut) -> None:
        _drop_lines_for_product(event.product_id, reason="sold_out")


@storefront.event_handler(part_of=Order)
class PurchasedCartLinesHandler:
    """Clears the lines an owner just bought."""

    @handle(OrderPlaced)
    def on_order_placed(self, event: OrderPlaced) -> None:
        items = json.loads(event.items) if isinstance(event.items, str) else (event.items or [])
        repo = current_domain.repository_for(CartItem)

        try:
            for item in items:
                line = repo.find_line(event.owner_id, item["product_id"])
                if line is not None:
                    repo.delete_line(line)
        except Exception as exc:
            logger.error(
                "cart.purchased_lines_cleanup_failed",
                order_number=event.order_number,
                error=str(exc),
                exc_info=True,
            )
            report_failure(
                exc,
                component="cart",
                operation="clear-purchased-lines",
                order_number=event.order_number,
                owner_id=str(event.owner_id),
            )
