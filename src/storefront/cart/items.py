"""Cart line management: commands and handler.

Stock is only read here; nothing in the cart touches inventory counts.
"""

import structlog
from protean import handle
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart_item import CartItem
from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.ownership import ensure_owner

logger = structlog.get_logger(__name__)


@storefront.command(part_of="CartItem")
class AddToCart:
    owner_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.command(part_of="CartItem")
class IncreaseCartItem:
    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="CartItem")
class DecreaseCartItem:
    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="CartItem")
class RemoveFromCart:
    owner_id = Identifier(required=True)
    line_id = Identifier(required=True)


@storefront.command(part_of="CartItem")
class PurgeExpiredCartItems:
    as_of = DateTime()


def _owned_line(repo, owner_id, line_id) -> CartItem:
    line = repo.get(line_id)
    ensure_owner("cart line", line_id, line.owner_id, owner_id)
    return line


@storefront.command_handler(part_of=CartItem)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        """Create or grow the owner's line for a product. Returns the line id."""
        products = current_domain.repository_for(Product)
        product = products.get_for_sale(command.product_id)

        repo = current_domain.repository_for(CartItem)
        line = repo.find_line(command.owner_id, command.product_id)
        if line is None:
            line = CartItem.open(command.owner_id, product, command.quantity)
        else:
            line.add_more(command.quantity, product.available_stock)

        repo.add(line)
        logger.info(
            "cart.line_added",
            owner_id=str(command.owner_id),
            product_id=str(command.product_id),
            quantity=line.quantity,
        )
        return str(line.id)

    @handle(IncreaseCartItem)
    def increase(self, command):
        """Add one unit. Returns the new quantity."""
        repo = current_domain.repository_for(CartItem)
        line = _owned_line(repo, command.owner_id, command.line_id)

        product = current_domain.repository_for(Product).get_for_sale(line.product_id)
        line.increase(product.available_stock)
        repo.add(line)
        return line.quantity

    @handle(DecreaseCartItem)
    def decrease(self, command):
        """Take one unit away, deleting the line at one unit. Returns the new quantity."""
        repo = current_domain.repository_for(CartItem)
        line = _owned_line(repo, command.owner_id, command.line_id)

        if line.quantity <= 1:
            repo.delete_line(line)
            logger.info("cart.line_removed", owner_id=str(command.owner_id), line_id=str(command.line_id))
            return 0

        line.decrease()
        repo.add(line)
        return line.quantity

    @handle(RemoveFromCart)
    def remove(self, command):
        """Delete the line. Returns False when there was nothing to delete."""
        repo = current_domain.repository_for(CartItem)
        line = repo.find(command.line_id)
        if line is None:
            return False

        ensure_owner("cart line", command.line_id, line.owner_id, command.owner_id)
        repo.delete_line(line)
        logger.info("cart.line_removed", owner_id=str(command.owner_id), line_id=str(command.line_id))
        return True

    @handle(PurgeExpiredCartItems)
    def purge_expired(self, command):
        """Delete every expired line. Returns how many were deleted."""
        repo = current_domain.repository_for(CartItem)
        expired = repo.expired(command.as_of)
        for line in expired:
            repo.delete_line(line)

        if expired:
            logger.info("cart.expired_lines_purged", count=len(expired))
        return len(expired)
