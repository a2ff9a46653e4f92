"""Cart line look-ups."""

from datetime import UTC, datetime

from storefront.cart.cart_item import CartItem, line_key_for
from storefront.domain import storefront
from storefront.store import store_operation


@storefront.repository(part_of=CartItem)
class CartItemRepository:
    def find(self, line_id) -> CartItem | None:
        with store_operation("cart.find", line_id=str(line_id)):
            return self._dao.query.filter(id=str(line_id)).all().first

    def find_line(self, owner_id, product_id) -> CartItem | None:
        """Return the owner's line for ``product_id``, if any."""
        with store_operation("cart.find_line", owner_id=str(owner_id)):
            return self._dao.query.filter(line_key=line_key_for(owner_id, product_id)).all().first

    def lines_for(self, owner_id) -> list[CartItem]:
        """All of an owner's lines, oldest first."""
        with store_operation("cart.lines_for", owner_id=str(owner_id)):
            return self._dao.query.filter(owner_id=str(owner_id)).order_by("created_at").all().items

    def lines_for_product(self, product_id) -> list[CartItem]:
        with store_operation("cart.lines_for_product", product_id=str(product_id)):
            return self._dao.query.filter(product_id=str(product_id)).all().items

    def expired(self, now=None) -> list[CartItem]:
        now = now or datetime.now(UTC)
        with store_operation("cart.expired"):
            lines = self._dao.query.all().items
        return [line for line in lines if line.is_expired(now)]

    def delete_line(self, line: CartItem) -> None:
        with store_operation("cart.remove", line_id=str(line.id)):
            self._dao.delete(line)
