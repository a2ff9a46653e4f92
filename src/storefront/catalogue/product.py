"""Product aggregate: the stock ledger behind the cart and checkout.

Holds the live sellable quantity and the running sold counter for one
product, plus the display data (name, category, price) the cart and order
snapshots copy. Stock is read by the cart and decremented only after an
order is placed; it may dip below zero when concurrent checkouts oversell,
which is left for reconciliation.
"""

from datetime import UTC, datetime

import structlog
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.catalogue.events import (
    ProductActivated,
    ProductDeactivated,
    ProductRegistered,
    ProductSoldOut,
    StockAdjusted,
    StockDecremented,
)
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.aggregate
class Product:
    name = String(required=True, max_length=100)
    category = String(max_length=50)
    price = Float(required=True, min_value=0.0)
    stock = Integer(default=0)
    sold = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, name, price, stock=0, category=None):
        if stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        now = datetime.now(UTC)
        product = cls(
            name=name,
            category=category,
            price=round(price, 2),
            stock=stock,
            sold=0,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                name=name,
                category=category,
                price=product.price,
                stock=stock,
                registered_at=now,
            )
        )
        return product

    @property
    def available_stock(self) -> int:
        return max(self.stock or 0, 0)

    @property
    def is_available(self) -> bool:
        return bool(self.is_active) and self.available_stock > 0

    def adjust_stock(self, new_stock):
        """Set stock to a counted level."""
        if new_stock < 0:
            raise ValidationError({"stock": ["Stock cannot be negative"]})

        previous = self.stock
        self.stock = new_stock
        self.updated_at = datetime.now(UTC)

        self.raise_(
            StockAdjusted(
                product_id=str(self.id),
                previous_stock=previous,
                new_stock=new_stock,
            )
        )
        if new_stock == 0 and previous > 0:
            self.raise_(ProductSoldOut(product_id=str(self.id), stock=new_stock))

    def record_sale(self, quantity, order_number=None):
        """Take sold units off the shelf and count them as sold."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Sold quantity must be at least 1"]})

        previous = self.stock
        self.stock = previous - quantity
        self.sold = (self.sold or 0) + quantity
        self.updated_at = datetime.now(UTC)

        if self.stock < 0:
            logger.warning(
                "stock.oversold",
                product_id=str(self.id),
                order_number=order_number,
                stock=self.stock,
            )

        self.raise_(
            StockDecremented(
                product_id=str(self.id),
                order_number=order_number,
                quantity=quantity,
                stock=self.stock,
                sold=self.sold,
            )
        )
        if self.stock <= 0 < previous:
            self.raise_(ProductSoldOut(product_id=str(self.id), stock=self.stock))

    def deactivate(self):
        if not self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(ProductDeactivated(product_id=str(self.id), deactivated_at=now))

    def activate(self):
        if self.is_active:
            return

        now = datetime.now(UTC)
        self.is_active = True
        self.updated_at = now
        self.raise_(ProductActivated(product_id=str(self.id), activated_at=now))
