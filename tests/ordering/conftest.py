import json

import pytest
from protean import current_domain
from storefront.cart.checkout_view import list_for_checkout
from storefront.cart.items import AddToCart
from storefront.ordering.finalization import FinalizeOrder


@pytest.fixture()
def fill_cart(register_product):
    """Put products in an owner's cart. Returns the product ids."""

    def _fill(owner_id="owner-1", lines=((20.0, 2, 10),)):
        product_ids = []
        for n, (price, quantity, stock) in enumerate(lines):
            product_id = register_product(name=f"Product {n}", price=price, stock=stock)
            current_domain.process(
                AddToCart(owner_id=owner_id, product_id=product_id, quantity=quantity),
                asynchronous=False,
            )
            product_ids.append(product_id)
        return product_ids

    return _fill


@pytest.fixture()
def checkout():
    """Finalize the owner's current cart. Returns ``{"order_id", "order_number"}``."""

    def _checkout(owner_id="owner-1", **overrides):
        summary = list_for_checkout(owner_id)
        data = {
            "owner_id": owner_id,
            "items": json.dumps(summary.snapshot()),
            "payment_channel": "WAAFI",
            "payment_account_number": "77123456",
            "payment_account_name": "Amina Hassan",
            "amount_paid": summary.subtotal or 1.0,
        }
        data.update(overrides)
        return current_domain.process(FinalizeOrder(**data), asynchronous=False)

    return _checkout
