"""Application tests for the per-owner order history."""

from protean import current_domain
from storefront.ordering.history import OrderHistory, order_history


class TestOrderHistory:
    def test_placed_order_appears(self, fill_cart, checkout):
        fill_cart()
        result = checkout()

        entry = current_domain.repository_for(OrderHistory).get(result["order_id"])
        assert entry.order_number == result["order_number"]
        assert entry.order_status == "Processing"
        assert entry.payment_status == "unpaid"
        assert entry.item_count == 2
        assert entry.total_amount == 40.0

    def test_pagination_newest_first(self, fill_cart, checkout):
        numbers = []
        for _ in range(3):
            fill_cart()
            numbers.append(checkout()["order_number"])

        first_page = order_history("owner-1", limit=2, page=1)
        second_page = order_history("owner-1", limit=2, page=2)

        assert first_page["total"] == 3
        assert [o.order_number for o in first_page["orders"]] == [numbers[2], numbers[1]]
        assert [o.order_number for o in second_page["orders"]] == [numbers[0]]

    def test_only_owners_orders(self, fill_cart, checkout):
        fill_cart("owner-1")
        checkout("owner-1")
        fill_cart("owner-2")
        checkout("owner-2")

        history = order_history("owner-1")
        assert history["total"] == 1
        assert history["page"] == 1
        assert history["limit"] == 10

    def test_bad_paging_values_clamped(self):
        history = order_history("owner-1", limit=0, page=-3)
        assert history["limit"] == 1
        assert history["page"] == 1
        assert history["orders"] == []
