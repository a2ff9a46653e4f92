"""Order aggregate (CQRS): the immutable record of a finalized checkout.

Line items and the payment snapshot are copied in at checkout and never
refer back to live product or address data, so later price or name changes
leave past orders alone. Only the two status fields move after creation, and
only forward.

Order status:
    Processing → Shipped → Delivered
    Processing → Cancelled (reason required)

Payment status:
    unpaid → processing → paid
    any → failed / refunded (refunded is terminal)
"""

import json
from datetime import UTC, datetime
from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    ValueObject,
)

from storefront.config import setting
from storefront.domain import storefront
from storefront.errors import EmptyCart, InvalidQuantity, InvalidStatusTransition
from storefront.ordering.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPlaced,
    OrderShipped,
    PaymentStatusChanged,
)

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PROCESSING = "processing"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class PaymentChannel(Enum):
    WAAFI = "WAAFI"
    D_MONEY = "D-MONEY"
    CAC_PAY = "CAC-PAY"
    BCI_PAY = "BCI-PAY"


_ORDER_TRANSITIONS = {
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PAYMENT_TRANSITIONS = {
    PaymentStatus.UNPAID: {PaymentStatus.PROCESSING, PaymentStatus.FAILED, PaymentStatus.REFUNDED},
    PaymentStatus.PROCESSING: {PaymentStatus.PAID, PaymentStatus.FAILED, PaymentStatus.REFUNDED},
    PaymentStatus.PAID: {PaymentStatus.FAILED, PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}


def mask_account_number(value: str | None) -> str | None:
    """Replace all but the last four characters with ``*``."""
    if value is None or len(value) <= 4:
        return value
    return "*" * (len(value) - 4) + value[-4:]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class PaymentSnapshot:
    """What the payment collaborator reported for this checkout.

    The account number is only ever stored masked.
    """

    amount_paid = Float(required=True, min_value=0.0)
    channel = String(required=True, choices=PaymentChannel)
    account_number = String(required=True, max_length=50)
    account_name = String(required=True, max_length=100)
    paid_on = DateTime()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A frozen line: what was bought, at what price, in what quantity."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    category = String(max_length=50)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    subtotal = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    owner_id = Identifier(required=True)
    order_number = String(required=True, max_length=32, unique=True)
    order_date = String(max_length=8)  # YYYYMMDD the number was issued for
    sequence = Integer(default=0)  # 0 for fallback numbers
    items = HasMany(OrderLine)
    shipping_address_id = Identifier()
    payment = ValueObject(PaymentSnapshot)
    total_amount = Float(required=True, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    shipping_amount = Float(default=0.0, min_value=0.0)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.UNPAID.value)
    order_status = String(choices=OrderStatus, default=OrderStatus.PROCESSING.value)
    cancel_reason = String(max_length=200)
    created_at = DateTime()
    updated_at = DateTime()
    paid_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        owner_id,
        order_number,
        lines,
        payment,
        tax_amount=0.0,
        shipping_amount=0.0,
        declared_total=None,
        shipping_address_id=None,
        order_date=None,
        sequence=0,
    ):
        """Build a new order from frozen line data.

        Args:
            lines: dicts with product_id, name, category, quantity, price and
                optionally subtotal (defaults to price × quantity).
            payment: dict with amount_paid, channel, account_number,
                account_name and optionally paid_on.
            declared_total: the caller's idea of the total. It is kept only
                when it agrees with the computed total within tolerance.
        """
        if not lines:
            raise EmptyCart("Cannot place an order without items")

        now = datetime.now(UTC)
        order = cls(
            owner_id=owner_id,
            order_number=order_number,
            order_date=order_date,
            sequence=sequence,
            shipping_address_id=shipping_address_id,
            payment=PaymentSnapshot(
                amount_paid=round(payment["amount_paid"], 2),
                channel=payment["channel"],
                account_number=mask_account_number(payment["account_number"]),
                account_name=payment["account_name"],
                paid_on=payment.get("paid_on") or now,
            ),
            total_amount=0.0,
            tax_amount=round(tax_amount or 0.0, 2),
            shipping_amount=round(shipping_amount or 0.0, 2),
            payment_status=PaymentStatus.UNPAID.value,
            order_status=OrderStatus.PROCESSING.value,
            created_at=now,
            updated_at=now,
        )
        order.add_items([_freeze_line(line) for line in lines])
        order.reconcile_total(declared_total)

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order.order_number,
                owner_id=str(owner_id),
                items=json.dumps(
                    [
                        {
                            "product_id": str(item.product_id),
                            "name": item.name,
                            "quantity": item.quantity,
                            "subtotal": item.subtotal,
                        }
                        for item in order.items
                    ]
                ),
                item_count=order.item_count,
                total_amount=order.total_amount,
                order_status=order.order_status,
                payment_status=order.payment_status,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Totals
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def computed_total(self) -> float:
        items_total = sum(item.subtotal for item in self.items)
        return round(items_total + (self.shipping_amount or 0.0) + (self.tax_amount or 0.0), 2)

    def reconcile_total(self, declared_total=None) -> bool:
        """Settle ``total_amount``. Returns True when the declared total was overridden."""
        computed = self.computed_total()
        # Compare at cent precision
        if declared_total is not None and round(abs(declared_total - computed), 2) <= setting("total_tolerance"):
            self.total_amount = round(declared_total, 2)
            return False

        if declared_total is not None:
            logger.info(
                "order.total_corrected",
                order_number=self.order_number,
                declared_total=declared_total,
                computed_total=computed,
            )
        self.total_amount = computed
        return declared_total is not None

    # -------------------------------------------------------------------
    # Order status
    # -------------------------------------------------------------------
    def _move_order_status(self, target) -> bool:
        """Apply a forward transition; False when already in ``target``."""
        current = OrderStatus(self.order_status)
        if current == target:
            return False
        if target not in _ORDER_TRANSITIONS[current]:
            raise InvalidStatusTransition(f"Cannot transition from {current.value} to {target.value}")
        self.order_status = target.value
        self.updated_at = datetime.now(UTC)
        return True

    def ship(self):
        if self._move_order_status(OrderStatus.SHIPPED):
            self.raise_(
                OrderShipped(
                    order_id=str(self.id),
                    owner_id=str(self.owner_id),
                    shipped_at=self.updated_at,
                )
            )

    def deliver(self):
        if self._move_order_status(OrderStatus.DELIVERED):
            self.delivered_at = self.delivered_at or self.updated_at
            self.raise_(
                OrderDelivered(
                    order_id=str(self.id),
                    owner_id=str(self.owner_id),
                    delivered_at=self.delivered_at,
                )
            )

    def cancel(self, reason):
        if not reason or not reason.strip():
            raise ValidationError({"cancel_reason": ["A cancellation reason is required"]})

        if self._move_order_status(OrderStatus.CANCELLED):
            self.cancel_reason = reason.strip()
            self.cancelled_at = self.cancelled_at or self.updated_at
            self.raise_(
                OrderCancelled(
                    order_id=str(self.id),
                    owner_id=str(self.owner_id),
                    reason=self.cancel_reason,
                    cancelled_at=self.cancelled_at,
                )
            )

    # -------------------------------------------------------------------
    # Payment status
    # -------------------------------------------------------------------
    def update_payment_status(self, new_status):
        try:
            target = PaymentStatus(new_status)
        except ValueError:
            raise ValidationError({"payment_status": [f"Unknown payment status: {new_status}"]}) from None

        current = PaymentStatus(self.payment_status)
        if current == target:
            return
        if target not in _PAYMENT_TRANSITIONS[current]:
            raise InvalidStatusTransition(f"Cannot transition payment from {current.value} to {target.value}")

        now = datetime.now(UTC)
        self.payment_status = target.value
        self.updated_at = now
        if target == PaymentStatus.PAID and self.paid_at is None:
            self.paid_at = now

        self.raise_(
            PaymentStatusChanged(
                order_id=str(self.id),
                owner_id=str(self.owner_id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )


def _freeze_line(line: dict) -> OrderLine:
    quantity = line.get("quantity")
    if not isinstance(quantity, int) or quantity < 1:
        raise InvalidQuantity("Each order line needs a quantity of at least 1")

    unit_price = round(float(line["price"]), 2)
    subtotal = line.get("subtotal")
    subtotal = round(unit_price * quantity if subtotal is None else float(subtotal), 2)

    return OrderLine(
        product_id=str(line["product_id"]),
        name=line["name"],
        category=line.get("category"),
        quantity=quantity,
        unit_price=unit_price,
        subtotal=subtotal,
    )
