"""Integration tests for the order endpoints."""

from unittest.mock import patch

from fastapi.testclient import TestClient
from protean import current_domain
from storefront.catalogue.management import AdjustStock
from storefront.catalogue.product import Product
from storefront.errors import StoreTimeout
from storefront.ordering.order import Order

OWNER = {"X-Owner-Id": "owner-1"}
OTHER = {"X-Owner-Id": "owner-2"}

PAYMENT = {
    "channel": "WAAFI",
    "account_number": "77123456",
    "account_name": "Amina Hassan",
    "amount_paid": 40.0,
}


def _fill(client, register_product, quantity=2, stock=10):
    product_id = register_product(price=20.0, stock=stock)
    client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=OWNER)
    return product_id


def _place(client, **body):
    return client.post("/orders", json={"payment": PAYMENT, **body}, headers=OWNER)


class TestPlaceOrderEndpoint:
    def test_place_order(self, client, register_product):
        product_id = _fill(client, register_product)

        response = _place(client, shipping_amount=5.0, total_amount=45.0)

        assert response.status_code == 201
        body = response.json()
        assert body["order_number"].startswith("ORD-")
        assert body["cart_adjusted"] is False

        order = current_domain.repository_for(Order).get(body["order_id"])
        assert order.total_amount == 45.0
        assert order.payment.account_number == "****3456"
        assert current_domain.repository_for(Product).get(product_id).stock == 8

    def test_cart_adjustment_reported(self, client, register_product):
        product_id = _fill(client, register_product, quantity=2, stock=2)
        current_domain.process(AdjustStock(product_id=product_id, stock=1), asynchronous=False)

        response = _place(client)

        assert response.status_code == 201
        assert response.json()["cart_adjusted"] is True

    def test_empty_cart(self, client):
        response = _place(client)
        assert response.status_code == 400
        assert response.json()["error"] == "EmptyCart"

    def test_unknown_payment_channel(self, client, register_product):
        _fill(client, register_product)
        response = client.post("/orders", json={"payment": {**PAYMENT, "channel": "CASH"}}, headers=OWNER)
        assert response.status_code == 400

    def test_store_timeout_is_retryable(self, client, register_product):
        _fill(client, register_product)
        with patch("storefront.api.routes.list_for_checkout", side_effect=StoreTimeout("timed out")):
            response = _place(client)

        assert response.status_code == 503
        assert response.json()["message"] == "Something went wrong, please retry."
        assert response.headers["Retry-After"] == "1"

    def test_unexpected_error_is_generic(self, app, register_product, monitor):
        client = TestClient(app, raise_server_exceptions=False)
        _fill(client, register_product)
        with patch("storefront.api.routes.list_for_checkout", side_effect=RuntimeError("db password=hunter2")):
            response = _place(client)

        assert response.status_code == 500
        assert response.json()["message"] == "Something went wrong, please retry."
        assert "hunter2" not in response.text
        assert len(monitor.for_operation("/orders")) == 1


class TestOrderLifecycleEndpoints:
    def _order_id(self, client, register_product):
        _fill(client, register_product)
        return _place(client).json()["order_id"]

    def test_ship_deliver(self, client, register_product):
        order_id = self._order_id(client, register_product)
        assert client.put(f"/orders/{order_id}/ship", headers=OWNER).status_code == 200
        assert client.put(f"/orders/{order_id}/deliver", headers=OWNER).status_code == 200

    def test_invalid_transition(self, client, register_product):
        order_id = self._order_id(client, register_product)
        response = client.put(f"/orders/{order_id}/deliver", headers=OWNER)
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidStatusTransition"

    def test_cancel_requires_reason(self, client, register_product):
        order_id = self._order_id(client, register_product)
        response = client.put(f"/orders/{order_id}/cancel", json={"reason": " "}, headers=OWNER)
        assert response.status_code == 400

    def test_payment_status(self, client, register_product):
        order_id = self._order_id(client, register_product)
        response = client.put(
            f"/orders/{order_id}/payment-status", json={"payment_status": "processing"}, headers=OWNER
        )
        assert response.status_code == 200

    def test_other_owner_forbidden(self, client, register_product):
        order_id = self._order_id(client, register_product)
        assert client.put(f"/orders/{order_id}/ship", headers=OTHER).status_code == 403

    def test_unknown_order(self, client):
        assert client.put("/orders/missing/ship", headers=OWNER).status_code == 404


class TestOrderHistoryEndpoint:
    def test_my_orders(self, client, register_product):
        for _ in range(3):
            _fill(client, register_product)
            _place(client)

        body = client.get("/orders/me?limit=2&page=1", headers=OWNER).json()
        assert body["total"] == 3
        assert len(body["orders"]) == 2
        assert body["orders"][0]["order_status"] == "Processing"

        assert client.get("/orders/me", headers=OTHER).json()["total"] == 0
