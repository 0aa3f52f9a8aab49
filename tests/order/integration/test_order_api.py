"""Integration tests for order API endpoints via TestClient."""

import pytest

SHIPPING = {
    "firstName": "Jane",
    "lastName": "Doe",
    "address1": "1 Main St",
    "city": "Springfield",
    "postalCode": "62701",
    "country": "US",
}


@pytest.fixture()
def create_order(client, auth_headers, make_product):
    def _create(user_id="user-001", price=50.0, quantity=2):
        product = make_product(price=price)
        response = client.post(
            "/api/orders",
            json={
                "items": [{"productId": str(product.id), "quantity": quantity}],
                "shippingAddress": SHIPPING,
                "paymentMethod": "credit_card",
            },
            headers=auth_headers(user_id),
        )
        assert response.status_code == 201
        return response.json()["data"]

    return _create


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.get("/api/orders/my-orders")
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, no token"

    def test_bad_token(self, client):
        response = client.get("/api/orders/my-orders", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401
        assert response.json()["message"] == "Not authorized, token failed"

    def test_customer_cannot_list_all_orders(self, client, auth_headers):
        response = client.get("/api/orders", headers=auth_headers("user-001"))
        assert response.status_code == 403
        assert response.json()["message"] == "Insufficient permissions"

    def test_customer_cannot_read_analytics(self, client, auth_headers):
        response = client.get("/api/orders/analytics/summary", headers=auth_headers("user-001"))
        assert response.status_code == 403


class TestCreateOrder:
    def test_create(self, create_order):
        data = create_order(price=50.0, quantity=2)
        assert data["orderNumber"].startswith("ORD-")
        assert data["subtotal"] == 100.0
        assert data["tax"] == 8.0
        assert data["shipping"] == 10.0
        assert data["total"] == 118.0
        assert data["status"] == "pending"
        assert data["paymentStatus"] == "pending"
        assert data["shippingAddress"]["firstName"] == "Jane"
        assert data["billingAddress"]["firstName"] == "Jane"
        assert data["timeline"][0]["note"] == "Order created"

    def test_insufficient_stock(self, client, auth_headers, make_product):
        product = make_product(name="Widget", quantity=1)
        response = client.post(
            "/api/orders",
            json={
                "items": [{"productId": str(product.id), "quantity": 5}],
                "shippingAddress": SHIPPING,
                "paymentMethod": "credit_card",
            },
            headers=auth_headers(),
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_malformed_body(self, client, auth_headers):
        response = client.post("/api/orders", json={"items": []}, headers=auth_headers())
        assert response.status_code == 400


class TestCheckout:
    def test_checkout_from_cart(self, client, auth_headers, make_product):
        product = make_product(price=25.0)
        headers = auth_headers("user-001")
        client.post("/api/cart/add", json={"productId": str(product.id), "quantity": 2}, headers=headers)

        response = client.post(
            "/api/orders/checkout",
            json={"shippingAddress": SHIPPING, "paymentMethod": "paypal"},
            headers=headers,
        )
        assert response.status_code == 201
        assert response.json()["data"]["subtotal"] == 50.0

        cart = client.get("/api/cart", headers=headers).json()["data"]
        assert cart["items"] == []

    def test_checkout_empty_cart(self, client, auth_headers):
        response = client.post(
            "/api/orders/checkout",
            json={"shippingAddress": SHIPPING, "paymentMethod": "paypal"},
            headers=auth_headers(),
        )
        assert response.status_code == 400


class TestReadOrders:
    def test_my_orders(self, client, auth_headers, create_order):
        create_order("user-001")
        create_order("user-002")

        response = client.get("/api/orders/my-orders", headers=auth_headers("user-001"))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalDocs"] == 1
        assert data["limit"] == 10
        assert len(data["docs"]) == 1

    def test_admin_lists_orders(self, client, auth_headers, create_order):
        create_order("user-001")
        create_order("user-002")

        response = client.get("/api/orders?limit=1", headers=auth_headers("admin-001", role="admin"))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalDocs"] == 2
        assert data["totalPages"] == 2
        assert data["hasNextPage"] is True

    def test_invalid_start_date(self, client, auth_headers):
        response = client.get("/api/orders?startDate=yesterday", headers=auth_headers("admin-001", role="admin"))
        assert response.status_code == 400

    def test_owner_reads_order(self, client, auth_headers, create_order):
        order = create_order("user-001")
        response = client.get(f"/api/orders/{order['id']}", headers=auth_headers("user-001"))
        assert response.status_code == 200
        assert response.json()["data"]["id"] == order["id"]

    def test_other_customer_gets_404(self, client, auth_headers, create_order):
        order = create_order("user-001")
        response = client.get(f"/api/orders/{order['id']}", headers=auth_headers("user-002"))
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_analytics(self, client, auth_headers, create_order):
        create_order(price=50.0, quantity=2)
        response = client.get("/api/orders/analytics/summary", headers=auth_headers("manager-001", role="manager"))
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalOrders"] == 1
        assert data["totalRevenue"] == 118.0
        assert data["averageOrderValue"] == 118.0


class TestOrderLifecycle:
    def test_status_update_with_tracking(self, client, auth_headers, create_order):
        order = create_order()
        response = client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "shipped", "tracking": {"carrier": "UPS", "trackingNumber": "1Z999"}},
            headers=auth_headers("admin-001", role="admin"),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "shipped"
        assert data["fulfillmentStatus"] == "fulfilled"
        assert data["tracking"]["trackingNumber"] == "1Z999"

    def test_customer_cannot_update_status(self, client, auth_headers, create_order):
        order = create_order()
        response = client.patch(
            f"/api/orders/{order['id']}/status",
            json={"status": "shipped"},
            headers=auth_headers("user-001"),
        )
        assert response.status_code == 403

    def test_payment_confirms_order(self, client, auth_headers, create_order):
        order = create_order()
        response = client.patch(
            f"/api/orders/{order['id']}/payment",
            json={"paymentStatus": "paid", "paymentDetails": {"transactionId": "txn_1"}},
            headers=auth_headers("admin-001", role="admin"),
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["paymentStatus"] == "paid"
        assert data["status"] == "confirmed"
        assert data["paymentDetails"]["transactionId"] == "txn_1"

    def test_owner_cancels(self, client, auth_headers, create_order):
        order = create_order()
        response = client.patch(
            f"/api/orders/{order['id']}/cancel",
            json={"reason": "Ordered by mistake"},
            headers=auth_headers("user-001"),
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "cancelled"

    def test_other_customer_cannot_cancel(self, client, auth_headers, create_order):
        order = create_order("user-001")
        response = client.patch(
            f"/api/orders/{order['id']}/cancel",
            json={},
            headers=auth_headers("user-002"),
        )
        assert response.status_code == 403

    def test_refund(self, client, auth_headers, create_order):
        order = create_order()
        admin = auth_headers("admin-001", role="admin")
        client.patch(f"/api/orders/{order['id']}/payment", json={"paymentStatus": "paid"}, headers=admin)

        response = client.post(
            f"/api/orders/{order['id']}/refunds",
            json={"amount": 18.0, "reason": "Late delivery"},
            headers=admin,
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["paymentStatus"] == "partially_refunded"
        assert data["refunds"][0]["amount"] == 18.0

    def test_unknown_order(self, client, auth_headers):
        response = client.patch(
            "/api/orders/missing/status",
            json={"status": "shipped"},
            headers=auth_headers("admin-001", role="admin"),
        )
        assert response.status_code == 404
