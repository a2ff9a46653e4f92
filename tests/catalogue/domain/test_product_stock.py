"""Tests for the stock ledger held by the Product aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.catalogue.events import (
    ProductDeactivated,
    ProductRegistered,
    ProductSoldOut,
    StockAdjusted,
    StockDecremented,
)
from storefront.catalogue.product import Product


def _product(stock=5, **kwargs):
    product = Product.register(name="Thermos", price=12.5, stock=stock, **kwargs)
    product._events.clear()
    return product


class TestRegisterProduct:
    def test_register_sets_initial_ledger(self):
        product = Product.register(name="Thermos", price=12.499, stock=4, category="Kitchen")
        assert product.stock == 4
        assert product.sold == 0
        assert product.price == 12.5
        assert product.is_active is True

    def test_register_raises_event(self):
        product = Product.register(name="Thermos", price=12.5, stock=4)
        assert len(product._events) == 1
        assert isinstance(product._events[0], ProductRegistered)

    def test_negative_initial_stock_rejected(self):
        with pytest.raises(ValidationError):
            Product.register(name="Thermos", price=12.5, stock=-1)


class TestAvailability:
    def test_in_stock_active_product_is_available(self):
        assert _product(stock=1).is_available is True

    def test_zero_stock_is_unavailable(self):
        assert _product(stock=0).is_available is False

    def test_inactive_product_is_unavailable(self):
        product = _product(stock=3)
        product.deactivate()
        assert product.is_available is False

    def test_available_stock_never_negative(self):
        product = _product(stock=1)
        product.record_sale(3)
        assert product.stock == -2
        assert product.available_stock == 0


class TestRecordSale:
    def test_decrements_stock_and_counts_sold(self):
        product = _product(stock=5)
        product.record_sale(2, order_number="ORD-20260101-00001")
        assert product.stock == 3
        assert product.sold == 2

    def test_raises_stock_decremented(self):
        product = _product(stock=5)
        product.record_sale(2, order_number="ORD-20260101-00001")
        event = product._events[0]
        assert isinstance(event, StockDecremented)
        assert event.quantity == 2
        assert event.stock == 3
        assert event.order_number == "ORD-20260101-00001"

    def test_selling_last_units_raises_sold_out(self):
        product = _product(stock=2)
        product.record_sale(2)
        assert any(isinstance(e, ProductSoldOut) for e in product._events)

    def test_overselling_is_recorded_not_refused(self):
        product = _product(stock=1)
        product.record_sale(4)
        assert product.stock == -3
        assert product.sold == 4

    def test_no_sold_out_when_already_at_zero(self):
        product = _product(stock=0)
        product.record_sale(1)
        assert not any(isinstance(e, ProductSoldOut) for e in product._events)

    def test_zero_quantity_rejected(self):
        with pytest.raises(ValidationError):
            _product().record_sale(0)


class TestAdjustStock:
    def test_adjust_sets_level(self):
        product = _product(stock=5)
        product.adjust_stock(9)
        assert product.stock == 9
        assert isinstance(product._events[0], StockAdjusted)

    def test_adjust_to_zero_raises_sold_out(self):
        product = _product(stock=5)
        product.adjust_stock(0)
        assert any(isinstance(e, ProductSoldOut) for e in product._events)

    def test_negative_adjustment_rejected(self):
        with pytest.raises(ValidationError):
            _product().adjust_stock(-1)


class TestActivation:
    def test_deactivate_raises_event_once(self):
        product = _product()
        product.deactivate()
        product.deactivate()
        assert len([e for e in product._events if isinstance(e, ProductDeactivated)]) == 1

    def test_activate_restores_availability(self):
        product = _product(stock=2)
        product.deactivate()
        product.activate()
        assert product.is_available is True
