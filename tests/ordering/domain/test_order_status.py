"""Tests for the order and payment status machines."""

import pytest
from protean.exceptions import ValidationError
from storefront.errors import InvalidStatusTransition
from storefront.ordering.events import (
    OrderCancelled,
    OrderDelivered,
    OrderShipped,
    PaymentStatusChanged,
)
from storefront.ordering.order import Order, OrderStatus, PaymentStatus


def _order():
    order = Order.place(
        owner_id="owner-1",
        order_number="ORD-20260101-00001",
        lines=[{"product_id": "p1", "name": "Kettle", "price": 20.0, "quantity": 1}],
        payment={
            "amount_paid": 20.0,
            "channel": "D-MONEY",
            "account_number": "77000001",
            "account_name": "Amina Hassan",
        },
    )
    order._events.clear()
    return order


class TestOrderStatus:
    def test_ship_then_deliver(self):
        order = _order()
        order.ship()
        order.deliver()
        assert order.order_status == OrderStatus.DELIVERED.value
        assert order.delivered_at is not None
        assert [type(e) for e in order._events] == [OrderShipped, OrderDelivered]

    def test_cannot_deliver_before_shipping(self):
        order = _order()
        with pytest.raises(InvalidStatusTransition):
            order.deliver()

    def test_cancel_while_processing(self):
        order = _order()
        order.cancel("  Changed my mind ")
        assert order.order_status == OrderStatus.CANCELLED.value
        assert order.cancel_reason == "Changed my mind"
        assert isinstance(order._events[0], OrderCancelled)

    def test_cancel_requires_reason(self):
        order = _order()
        with pytest.raises(ValidationError):
            order.cancel("   ")
        assert order.order_status == OrderStatus.PROCESSING.value

    def test_cannot_cancel_after_shipping(self):
        order = _order()
        order.ship()
        with pytest.raises(InvalidStatusTransition):
            order.cancel("Too late")

    @pytest.mark.parametrize("terminal", ["deliver", "cancel"])
    def test_terminal_states_cannot_be_left(self, terminal):
        order = _order()
        if terminal == "deliver":
            order.ship()
            order.deliver()
        else:
            order.cancel("Duplicate")
        with pytest.raises(InvalidStatusTransition):
            order.ship()

    def test_repeating_current_status_is_a_no_op(self):
        order = _order()
        order.ship()
        order._events.clear()
        order.ship()
        assert order._events == []


class TestPaymentStatus:
    def test_forward_path(self):
        order = _order()
        order.update_payment_status("processing")
        order.update_payment_status("paid")
        assert order.payment_status == PaymentStatus.PAID.value
        assert order.paid_at is not None

    def test_change_raises_event(self):
        order = _order()
        order.update_payment_status("processing")
        event = order._events[0]
        assert isinstance(event, PaymentStatusChanged)
        assert event.previous_status == "unpaid"
        assert event.new_status == "processing"

    def test_refunded_is_terminal(self):
        order = _order()
        order.update_payment_status("refunded")
        with pytest.raises(InvalidStatusTransition):
            order.update_payment_status("paid")

    def test_failed_can_only_be_refunded(self):
        order = _order()
        order.update_payment_status("failed")
        with pytest.raises(InvalidStatusTransition):
            order.update_payment_status("paid")
        order.update_payment_status("refunded")
        assert order.payment_status == PaymentStatus.REFUNDED.value

    def test_cannot_skip_to_paid(self):
        with pytest.raises(InvalidStatusTransition):
            _order().update_payment_status("paid")

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            _order().update_payment_status("settled")

    def test_paid_at_set_once(self):
        order = _order()
        order.update_payment_status("processing")
        order.update_payment_status("paid")
        first_paid_at = order.paid_at
        order.update_payment_status("paid")
        assert order.paid_at == first_paid_at
