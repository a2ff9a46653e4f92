"""Checkout view of an owner's cart.

Reads the owner's lines against live product data: quantities are clamped to
what is on the shelf now, and lines that cannot be bought (inactive, sold
out, deleted product, expired line) are left out. Nothing is written.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime

from protean.utils.globals import current_domain

from storefront.cart.cart_item import CartItem
from storefront.catalogue.product import Product


@dataclass(frozen=True)
class CheckoutLine:
    line_id: str
    product_id: str
    name: str
    category: str | None
    unit_price: float
    quantity: int
    requested_quantity: int
    adjusted: bool

    @property
    def subtotal(self) -> float:
        return round(self.unit_price * self.quantity, 2)

    def to_snapshot(self) -> dict:
        """The line as the order assembler consumes it."""
        return {
            "product_id": self.product_id,
            "name": self.name,
            "category": self.category,
            "price": self.unit_price,
            "quantity": self.quantity,
            "subtotal": self.subtotal,
        }


@dataclass(frozen=True)
class CheckoutSummary:
    owner_id: str
    lines: list[CheckoutLine] = field(default_factory=list)

    @property
    def adjusted(self) -> bool:
        return any(line.adjusted for line in self.lines)

    @property
    def subtotal(self) -> float:
        return round(sum(line.subtotal for line in self.lines), 2)

    def snapshot(self) -> list[dict]:
        return [line.to_snapshot() for line in self.lines]


def list_for_checkout(owner_id, now=None) -> CheckoutSummary:
    """Return the owner's purchasable lines, clamped to current stock."""
    now = now or datetime.now(UTC)
    lines = current_domain.repository_for(CartItem).lines_for(owner_id)
    products = current_domain.repository_for(Product).find_many(line.product_id for line in lines)

    checkout_lines = []
    for line in lines:
        product = products.get(str(line.product_id))
        if product is None or not product.is_available or line.is_expired(now):
            continue

        quantity = line.clamped_quantity(product.available_stock)
        checkout_lines.append(
            CheckoutLine(
                line_id=str(line.id),
                product_id=str(line.product_id),
                name=product.name,
                category=product.category,
                unit_price=product.price,
                quantity=quantity,
                requested_quantity=line.quantity,
                adjusted=quantity != line.quantity,
            )
        )

    return CheckoutSummary(owner_id=str(owner_id), lines=checkout_lines)
