"""Order finalization: turns a cart snapshot into a persisted Order.

The order is written in one aggregate write. Stock decrement and cart
cleanup are not part of that write: they react to ``OrderPlaced`` after the
order is committed, and their failures never undo it.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.addresses.address_book import AddressBook
from storefront.addresses.management import owned_book
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.errors import EmptyCart, ProductUnavailable
from storefront.ordering.numbering import OrderNumberGenerator, parse_order_number
from storefront.ordering.order import Order, mask_account_number

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class FinalizeOrder:
    owner_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of cart snapshot lines
    shipping_address_id = Identifier()
    payment_channel = String(required=True, max_length=20)
    payment_account_number = String(required=True, max_length=50)
    payment_account_name = String(required=True, max_length=100)
    amount_paid = Float(required=True)
    paid_on = DateTime()
    tax_amount = Float(default=0.0)
    shipping_amount = Float(default=0.0)
    total_amount = Float()  # Optional: the caller's total, checked against the lines


class OrderAssembler:
    """Builds and stores orders from cart snapshots."""

    def __init__(self, generator: OrderNumberGenerator | None = None):
        self.generator = generator or OrderNumberGenerator()

    def finalize(
        self,
        owner_id,
        cart_snapshot,
        payment_info,
        tax_amount=0.0,
        shipping_amount=0.0,
        address_id=None,
        declared_total=None,
    ) -> Order:
        if not cart_snapshot:
            raise EmptyCart("Your cart is empty")

        lines = self._freeze_lines(cart_snapshot)
        self._check_address(owner_id, address_id)
        self._check_payment(payment_info)

        repo = current_domain.repository_for(Order)
        order_number = self.generator.next()
        if repo.number_taken(order_number):
            logger.warning("order_number.collision", order_number=order_number)
            order_number = self.generator.fallback()

        today = self.generator.today()
        parsed = parse_order_number(order_number)
        sequence = parsed[1] if parsed and parsed[0] == today else 0

        order = Order.place(
            owner_id=owner_id,
            order_number=order_number,
            lines=lines,
            payment=payment_info,
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            declared_total=declared_total,
            shipping_address_id=address_id,
            order_date=today,
            sequence=sequence,
        )
        repo.add(order)

        logger.info(
            "order.placed",
            owner_id=str(owner_id),
            order_number=order.order_number,
            total_amount=order.total_amount,
            item_count=order.item_count,
        )
        return order

    def _freeze_lines(self, cart_snapshot) -> list[dict]:
        """Fill in name, category and price from the catalog where the snapshot lacks them."""
        if any(not line.get("product_id") for line in cart_snapshot):
            raise ValidationError({"items": ["Every line needs a product_id"]})

        products = current_domain.repository_for(Product).find_many(line["product_id"] for line in cart_snapshot)

        frozen = []
        for line in cart_snapshot:
            product = products.get(str(line["product_id"]))
            missing = not line.get("name") or line.get("price") is None
            if missing and product is None:
                raise ProductUnavailable("Product not found", product_id=str(line["product_id"]))

            frozen.append(
                {
                    "product_id": str(line["product_id"]),
                    "name": line.get("name") or product.name,
                    "category": line.get("category") or (product.category if product else None),
                    "price": line["price"] if line.get("price") is not None else product.price,
                    "quantity": line.get("quantity"),
                    "subtotal": line.get("subtotal"),
                }
            )
        return frozen

    def _check_address(self, owner_id, address_id):
        if address_id is None:
            return
        owned_book(current_domain.repository_for(AddressBook), owner_id, address_id)

    def _check_payment(self, payment_info):
        errors = {}
        for key in ("channel", "account_number", "account_name"):
            if not payment_info.get(key):
                errors[key] = [f"{key.replace('_', ' ').capitalize()} is required"]
        amount = payment_info.get("amount_paid")
        if amount is None or amount <= 0:
            errors["amount_paid"] = ["Amount paid must be greater than zero"]
        if errors:
            raise ValidationError(errors)


@storefront.command_handler(part_of=Order)
class FinalizeOrderHandler:
    @handle(FinalizeOrder)
    def finalize_order(self, command):
        """Returns ``{"order_id": ..., "order_number": ...}``."""
        items = json.loads(command.items) if isinstance(command.items, str) else command.items

        order = OrderAssembler().finalize(
            owner_id=command.owner_id,
            cart_snapshot=items,
            payment_info={
                "amount_paid": command.amount_paid,
                "channel": command.payment_channel,
                "account_number": mask_account_number(command.payment_account_number),
                "account_name": command.payment_account_name,
                "paid_on": command.paid_on,
            },
            tax_amount=command.tax_amount or 0.0,
            shipping_amount=command.shipping_amount or 0.0,
            address_id=command.shipping_address_id,
            declared_total=command.total_amount,
        )
        return {"order_id": str(order.id), "order_number": order.order_number}
