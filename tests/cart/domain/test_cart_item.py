"""Tests for the CartItem aggregate."""

from datetime import UTC, datetime, timedelta

import pytest
from storefront.cart.cart_item import CartItem, line_key_for
from storefront.cart.events import CartItemAdded, CartItemQuantityChanged
from storefront.catalogue.product import Product
from storefront.errors import InsufficientStock, InvalidQuantity


def _product(stock=5):
    return Product.register(name="Thermos", price=12.5, stock=stock, category="Kitchen")


def _line(requested=2, stock=5):
    line = CartItem.open("owner-1", _product(stock), requested)
    line._events.clear()
    return line


class TestOpenLine:
    def test_open_captures_product_details(self):
        product = _product()
        line = CartItem.open("owner-1", product, 2)
        assert line.quantity == 2
        assert line.unit_price == 12.5
        assert line.product_name == "Thermos"
        assert line.line_key == line_key_for("owner-1", product.id)

    def test_open_clamps_to_available_stock(self):
        line = CartItem.open("owner-1", _product(stock=3), 8)
        assert line.quantity == 3

    def test_open_sets_expiry_a_week_out(self):
        line = CartItem.open("owner-1", _product(), 1)
        assert line.expires_at - line.created_at == timedelta(days=7)

    def test_open_raises_event_with_requested_and_granted_quantity(self):
        line = CartItem.open("owner-1", _product(stock=3), 8)
        event = line._events[0]
        assert isinstance(event, CartItemAdded)
        assert event.requested_quantity == 8
        assert event.quantity == 3

    @pytest.mark.parametrize("requested", [0, -1, 100, None])
    def test_requested_quantity_out_of_range(self, requested):
        with pytest.raises(InvalidQuantity):
            CartItem.open("owner-1", _product(), requested)


class TestQuantityChanges:
    def test_add_more_grows_line(self):
        line = _line(requested=2)
        line.add_more(2, available_stock=10)
        assert line.quantity == 4

    def test_add_more_never_exceeds_stock(self):
        line = _line(requested=2)
        line.add_more(5, available_stock=4)
        assert line.quantity == 4

    def test_increase_by_one(self):
        line = _line(requested=2)
        line.increase(available_stock=5)
        assert line.quantity == 3
        event = line._events[0]
        assert isinstance(event, CartItemQuantityChanged)
        assert event.previous_quantity == 2
        assert event.new_quantity == 3

    def test_increase_past_stock_is_refused(self):
        line = _line(requested=3, stock=3)
        with pytest.raises(InsufficientStock) as exc:
            line.increase(available_stock=3)
        assert str(exc.value) == "Only 3 units available"
        assert line.quantity == 3

    def test_decrease_by_one(self):
        line = _line(requested=3)
        line.decrease()
        assert line.quantity == 2

    def test_decrease_at_one_is_refused(self):
        line = _line(requested=1)
        with pytest.raises(InvalidQuantity):
            line.decrease()


class TestReads:
    def test_clamped_quantity(self):
        line = _line(requested=4)
        assert line.clamped_quantity(10) == 4
        assert line.clamped_quantity(2) == 2
        assert line.clamped_quantity(-3) == 0

    def test_is_expired(self):
        line = _line()
        assert line.is_expired() is False
        assert line.is_expired(datetime.now(UTC) + timedelta(days=8)) is True

    def test_naive_expiry_compared_as_utc(self):
        line = _line()
        line.expires_at = datetime(2020, 1, 1)
        assert line.is_expired(datetime(2020, 1, 2, tzinfo=UTC)) is True
