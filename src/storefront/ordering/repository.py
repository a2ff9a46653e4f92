"""Order look-ups used by numbering and checkout."""

from storefront.domain import storefront
from storefront.ordering.order import Order
from storefront.store import store_operation


@storefront.repository(part_of=Order)
class OrderRepository:
    def latest_for_date(self, order_date: str) -> Order | None:
        """The order with the highest sequence issued for ``order_date``."""
        with store_operation("order.latest_for_date", order_date=order_date):
            return (
                self._dao.query.filter(order_date=order_date, sequence__gt=0)
                .order_by("-sequence")
                .limit(1)
                .all()
                .first
            )

    def number_taken(self, order_number: str) -> bool:
        with store_operation("order.number_taken", order_number=order_number):
            return self._dao.query.filter(order_number=order_number).all().first is not None
