"""Storefront bounded context: cart, address book, checkout and orders.

Owns the order-finalization engine: stock-bound cart lines, the per-owner
default address, order numbering and order assembly with a post-commit
inventory decrement.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

storefront = Domain(name="storefront")
