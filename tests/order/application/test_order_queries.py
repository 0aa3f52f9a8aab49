from datetime import timedelta

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.access.identity import Identity
from storefront.order.analytics import order_analytics
from storefront.order.payment import UpdatePaymentStatus
from storefront.order.queries import get_order, my_orders, search_orders
from storefront.order.status import UpdateOrderStatus
from storefront.shared.clock import utcnow
from storefront.shared.errors import NotFoundError
from storefront.shared.records import paginate

ADMIN = Identity.user("admin-001", role="admin")


class TestSearchOrders:
    def test_admin_sees_every_order(self, place_order):
        place_order(customer_id="user-001")
        place_order(customer_id="user-002")

        result = search_orders(ADMIN)
        assert result["total_docs"] == 2

    def test_customer_only_sees_own_orders(self, place_order):
        mine, _ = place_order(customer_id="user-001")
        place_order(customer_id="user-002")

        result = search_orders(Identity.user("user-001"))
        assert [str(o.id) for o in result["docs"]] == [str(mine.id)]

    def test_filters_by_status_and_payment_status(self, place_order):
        shipped, _ = place_order()
        paid, _ = place_order()
        place_order()
        current_domain.process(UpdateOrderStatus(order_id=str(shipped.id), status="shipped"), asynchronous=False)
        current_domain.process(UpdatePaymentStatus(order_id=str(paid.id), payment_status="paid"), asynchronous=False)

        assert [str(o.id) for o in search_orders(ADMIN, status="shipped")["docs"]] == [str(shipped.id)]
        assert [str(o.id) for o in search_orders(ADMIN, payment_status="paid")["docs"]] == [str(paid.id)]

    def test_search_matches_order_number_and_name(self, place_order):
        order, _ = place_order()
        place_order()

        by_number = search_orders(ADMIN, search=order.order_number.lower())
        assert [str(o.id) for o in by_number["docs"]] == [str(order.id)]
        assert search_orders(ADMIN, search="jane")["total_docs"] == 2
        assert search_orders(ADMIN, search="nobody")["total_docs"] == 0

    def test_sort_and_paginate(self, place_order):
        for price in (10.0, 30.0, 20.0):
            place_order(price=price, quantity=1)

        first = search_orders(ADMIN, sort="-total", page=1, limit=2)
        assert [o.pricing.subtotal for o in first["docs"]] == [30.0, 20.0]
        assert first["total_pages"] == 2
        assert first["has_next_page"] is True
        assert first["has_prev_page"] is False

        second = search_orders(ADMIN, sort="-total", page=2, limit=2)
        assert [o.pricing.subtotal for o in second["docs"]] == [10.0]
        assert second["has_next_page"] is False

    def test_date_window(self, place_order):
        place_order()
        tomorrow = utcnow() + timedelta(days=1)
        assert search_orders(ADMIN, start=tomorrow)["total_docs"] == 0
        assert search_orders(ADMIN, end=tomorrow)["total_docs"] == 1

    def test_unknown_sort_key(self):
        with pytest.raises(ValidationError):
            search_orders(ADMIN, sort="-colour")


class TestPaginate:
    def test_empty(self):
        page = paginate([], page=1, limit=20)
        assert page["total_pages"] == 0
        assert page["docs"] == []
        assert page["has_next_page"] is False

    def test_non_positive_page(self):
        with pytest.raises(ValidationError):
            paginate([1, 2], page=0)


class TestMyOrders:
    def test_lists_callers_orders(self, place_order):
        place_order(customer_id="user-001")
        place_order(customer_id="user-001")
        place_order(customer_id="user-002")

        result = my_orders(Identity.user("user-001"))
        assert result["total_docs"] == 2
        assert result["limit"] == 10

    def test_status_filter(self, place_order):
        order, _ = place_order(customer_id="user-001")
        place_order(customer_id="user-001")
        current_domain.process(UpdateOrderStatus(order_id=str(order.id), status="confirmed"), asynchronous=False)

        result = my_orders(Identity.user("user-001"), status="confirmed")
        assert [str(o.id) for o in result["docs"]] == [str(order.id)]


class TestGetOrder:
    def test_owner_and_admin_can_read(self, place_order):
        order, _ = place_order(customer_id="user-001")
        assert get_order(Identity.user("user-001"), order.id).id == order.id
        assert get_order(ADMIN, order.id).id == order.id

    def test_other_customer_gets_not_found(self, place_order):
        order, _ = place_order(customer_id="user-001")
        with pytest.raises(NotFoundError):
            get_order(Identity.user("user-002"), order.id)


class TestOrderAnalytics:
    def test_no_orders(self):
        assert order_analytics() == {
            "total_orders": 0,
            "total_revenue": 0.0,
            "average_order_value": 0.0,
            "pending_orders": 0,
            "completed_orders": 0,
        }

    def test_totals(self, place_order):
        delivered, _ = place_order(price=50.0, quantity=2)  # 118.0
        place_order(price=20.0, quantity=1)  # 31.6
        current_domain.process(UpdateOrderStatus(order_id=str(delivered.id), status="delivered"), asynchronous=False)

        summary = order_analytics()
        assert summary["total_orders"] == 2
        assert summary["total_revenue"] == 149.6
        assert summary["average_order_value"] == 74.8
        assert summary["pending_orders"] == 1
        assert summary["completed_orders"] == 1

    def test_window_excludes_older_orders(self, place_order):
        place_order()
        assert order_analytics(start=utcnow() + timedelta(minutes=5))["total_orders"] == 0
