"""Integration tests for the cart endpoints."""

from unittest.mock import patch

from protean import current_domain
from protean.exceptions import TransactionError
from sqlalchemy.exc import OperationalError
from storefront.catalogue.management import AdjustStock
from storefront.domain import storefront

OWNER = {"X-Owner-Id": "owner-1"}
OTHER = {"X-Owner-Id": "owner-2"}


def _add(client, product_id, quantity=1, headers=OWNER):
    return client.post("/cart/items", json={"product_id": product_id, "quantity": quantity}, headers=headers)


class TestAddToCartEndpoint:
    def test_add(self, client, register_product):
        response = _add(client, register_product(), 2)
        assert response.status_code == 201
        assert "line_id" in response.json()

    def test_owner_header_required(self, client, register_product):
        response = client.post("/cart/items", json={"product_id": register_product(), "quantity": 1})
        assert response.status_code == 422

    def test_out_of_stock_is_a_conflict(self, client, register_product):
        response = _add(client, register_product(stock=0))
        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "ProductUnavailable"
        assert body["message"] == "Product is out of stock"

    def test_invalid_quantity_is_a_bad_request(self, client, register_product):
        response = _add(client, register_product(), 0)
        assert response.status_code == 400
        assert response.json()["error"] == "InvalidQuantity"


class TestQuantityEndpoints:
    def test_increase_and_decrease(self, client, register_product):
        line_id = _add(client, register_product(stock=5), 2).json()["line_id"]

        response = client.post(f"/cart/items/{line_id}/increase", headers=OWNER)
        assert response.json()["quantity"] == 3

        response = client.post(f"/cart/items/{line_id}/decrease", headers=OWNER)
        assert response.json() == {"line_id": line_id, "quantity": 2, "removed": False}

    def test_decrease_last_unit_removes(self, client, register_product):
        line_id = _add(client, register_product(), 1).json()["line_id"]
        response = client.post(f"/cart/items/{line_id}/decrease", headers=OWNER)
        assert response.json()["removed"] is True

    def test_increase_past_stock(self, client, register_product):
        line_id = _add(client, register_product(stock=2), 2).json()["line_id"]
        response = client.post(f"/cart/items/{line_id}/increase", headers=OWNER)
        assert response.status_code == 409
        assert response.json()["message"] == "Only 2 units available"

    def test_other_owner_forbidden(self, client, register_product):
        line_id = _add(client, register_product()).json()["line_id"]
        response = client.post(f"/cart/items/{line_id}/increase", headers=OTHER)
        assert response.status_code == 403

    def test_unknown_line(self, client):
        response = client.post("/cart/items/missing/increase", headers=OWNER)
        assert response.status_code == 404


class TestRemoveEndpoint:
    def test_remove_twice(self, client, register_product):
        line_id = _add(client, register_product()).json()["line_id"]
        assert client.delete(f"/cart/items/{line_id}", headers=OWNER).json() == {"removed": True}
        assert client.delete(f"/cart/items/{line_id}", headers=OWNER).json() == {"removed": False}


class TestCheckoutViewEndpoint:
    def test_checkout_view_flags_adjustment(self, client, register_product):
        product_id = register_product(price=10.0, stock=10)
        _add(client, product_id, 4)
        current_domain.process(AdjustStock(product_id=product_id, stock=1), asynchronous=False)

        body = client.get("/cart/checkout", headers=OWNER).json()
        assert body["adjusted"] is True
        assert body["subtotal"] == 10.0
        assert body["lines"][0]["quantity"] == 1
        assert body["lines"][0]["requested_quantity"] == 4


class TestStoreFailures:
    def test_commit_timeout_is_retryable(self, client, register_product):
        product_id = register_product()
        failure = TransactionError("Unit of Work commit failed")
        failure.__cause__ = OperationalError("COMMIT", {}, Exception("canceling statement due to statement timeout"))

        with patch.object(storefront, "process", side_effect=failure):
            response = _add(client, product_id)

        assert response.status_code == 503
        assert response.json()["error"] == "StoreTimeout"
        assert response.headers["Retry-After"] == "1"
