"""CartItem aggregate (CQRS): one product line in one owner's cart.

Each (owner, product) pair has at most one line; ``line_key`` carries that
pair so the store rejects duplicates as well. Quantities are bound to the
product's live stock when written and clamped again when read for checkout.
Price and name are captured when the line is created.
"""

from datetime import UTC, datetime, timedelta

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.cart.events import CartItemAdded, CartItemQuantityChanged
from storefront.config import setting
from storefront.domain import storefront
from storefront.errors import InsufficientStock, InvalidQuantity


def _as_utc(value: datetime) -> datetime:
    # Stores may hand timestamps back without tzinfo
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def line_key_for(owner_id, product_id) -> str:
    return f"{owner_id}:{product_id}"


def validate_requested_quantity(quantity) -> None:
    maximum = setting("max_line_quantity")
    if quantity is None or not 1 <= quantity <= maximum:
        raise InvalidQuantity(f"Quantity must be between 1 and {maximum}")


@storefront.aggregate
class CartItem:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    line_key = String(required=True, max_length=255, unique=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(min_value=0.0)
    product_name = String(max_length=100)
    created_at = DateTime()
    updated_at = DateTime()
    expires_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def open(cls, owner_id, product, requested_quantity):
        """Start a line for ``product``, clamped to its available stock."""
        validate_requested_quantity(requested_quantity)

        now = datetime.now(UTC)
        line = cls(
            owner_id=owner_id,
            product_id=str(product.id),
            line_key=line_key_for(owner_id, product.id),
            quantity=min(requested_quantity, product.available_stock),
            unit_price=product.price,
            product_name=product.name,
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(days=setting("cart_line_ttl_days")),
        )
        line.raise_(
            CartItemAdded(
                line_id=str(line.id),
                owner_id=str(owner_id),
                product_id=str(product.id),
                requested_quantity=requested_quantity,
                quantity=line.quantity,
            )
        )
        return line

    # -------------------------------------------------------------------
    # Quantity changes
    # -------------------------------------------------------------------
    def add_more(self, requested_quantity, available_stock):
        """Grow the line by ``requested_quantity``, never past available stock."""
        validate_requested_quantity(requested_quantity)

        previous = self.quantity
        self.quantity = min(previous + requested_quantity, available_stock)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemAdded(
                line_id=str(self.id),
                owner_id=str(self.owner_id),
                product_id=str(self.product_id),
                requested_quantity=requested_quantity,
                quantity=self.quantity,
            )
        )

    def increase(self, available_stock):
        if self.quantity + 1 > available_stock:
            raise InsufficientStock(
                f"Only {available_stock} units available",
                available=available_stock,
            )
        self._change_quantity(self.quantity + 1)

    def decrease(self):
        """Drop one unit. Callers delete the line instead when it holds one unit."""
        if self.quantity <= 1:
            raise InvalidQuantity("Quantity cannot drop below 1; remove the line instead")
        self._change_quantity(self.quantity - 1)

    def _change_quantity(self, new_quantity):
        previous = self.quantity
        self.quantity = new_quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                line_id=str(self.id),
                owner_id=str(self.owner_id),
                previous_quantity=previous,
                new_quantity=new_quantity,
            )
        )

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def clamped_quantity(self, available_stock) -> int:
        return min(self.quantity, max(available_stock, 0))

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        return _as_utc(self.expires_at) <= _as_utc(now or datetime.now(UTC))
