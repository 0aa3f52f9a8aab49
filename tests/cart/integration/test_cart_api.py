"""Integration tests for cart API endpoints via TestClient."""

from protean import current_domain

from storefront.cart.cart import ShoppingCart

GUEST_HEADERS = {"X-Session-Id": "sess-001"}


def _add(client, product, quantity=1, headers=GUEST_HEADERS, **extra):
    return client.post(
        "/api/cart/add",
        json={"productId": str(product.id), "quantity": quantity, **extra},
        headers=headers,
    )


class TestGetCart:
    def test_guest_gets_empty_cart(self, client):
        response = client.get("/api/cart", headers=GUEST_HEADERS)
        assert response.status_code == 200

        payload = response.json()
        assert payload["success"] is True
        assert payload["message"] == "Cart retrieved successfully"
        assert payload["data"]["sessionId"] == "sess-001"
        assert payload["data"]["items"] == []
        assert payload["data"]["itemCount"] == 0

    def test_no_identity_is_rejected(self, client):
        response = client.get("/api/cart")
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_invalid_token_falls_back_to_session(self, client):
        headers = {"Authorization": "Bearer not-a-token", **GUEST_HEADERS}
        response = client.get("/api/cart", headers=headers)
        assert response.status_code == 200
        assert response.json()["data"]["sessionId"] == "sess-001"

    def test_user_cart(self, client, auth_headers):
        response = client.get("/api/cart", headers=auth_headers("user-001"))
        assert response.status_code == 200
        assert response.json()["data"]["customerId"] == "user-001"


class TestCartItems:
    def test_add_item(self, client, make_product):
        product = make_product(name="Widget", price=50.0)
        response = _add(client, product, 2, variant="red")
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["itemCount"] == 2
        assert data["subtotal"] == 100.0
        item = data["items"][0]
        assert item["productId"] == str(product.id)
        assert item["variant"] == "red"
        assert item["product"]["name"] == "Widget"

    def test_add_over_stock(self, client, make_product):
        product = make_product(quantity=3)
        response = _add(client, product, 5)
        assert response.status_code == 400
        assert response.json()["message"] == "Insufficient stock"

        summary = client.get("/api/cart/summary", headers=GUEST_HEADERS).json()["data"]
        assert summary == {"itemCount": 0, "subtotal": 0.0}

    def test_add_missing_product(self, client):
        response = client.post("/api/cart/add", json={"productId": "missing"}, headers=GUEST_HEADERS)
        assert response.status_code == 404
        assert response.json()["message"] == "Product not found"

    def test_add_accepts_snake_case(self, client, make_product):
        product = make_product()
        response = client.post(
            "/api/cart/add",
            json={"product_id": str(product.id), "quantity": 1},
            headers=GUEST_HEADERS,
        )
        assert response.status_code == 200

    def test_malformed_body(self, client):
        response = client.post("/api/cart/add", json={"quantity": "many"}, headers=GUEST_HEADERS)
        assert response.status_code == 400
        assert response.json()["message"] == "Invalid request body"

    def test_update_item(self, client, make_product):
        product = make_product(price=5.0)
        item_id = _add(client, product).json()["data"]["items"][0]["id"]

        response = client.put(f"/api/cart/item/{item_id}", json={"quantity": 3}, headers=GUEST_HEADERS)
        assert response.status_code == 200
        assert response.json()["data"]["subtotal"] == 15.0

    def test_update_item_below_one(self, client, make_product):
        item_id = _add(client, make_product()).json()["data"]["items"][0]["id"]
        response = client.put(f"/api/cart/item/{item_id}", json={"quantity": 0}, headers=GUEST_HEADERS)
        assert response.status_code == 400

    def test_update_without_cart(self, client):
        response = client.put("/api/cart/item/missing", json={"quantity": 1}, headers=GUEST_HEADERS)
        assert response.status_code == 404
        assert response.json()["message"] == "Cart not found"

    def test_remove_item(self, client, make_product):
        item_id = _add(client, make_product()).json()["data"]["items"][0]["id"]
        response = client.delete(f"/api/cart/item/{item_id}", headers=GUEST_HEADERS)
        assert response.status_code == 200
        assert response.json()["data"]["items"] == []

    def test_clear(self, client, make_product):
        _add(client, make_product(), 2)
        response = client.delete("/api/cart/clear", headers=GUEST_HEADERS)
        assert response.status_code == 200
        assert response.json()["data"]["itemCount"] == 0


class TestMergeCart:
    def test_requires_authenticated_user(self, client):
        response = client.post("/api/cart/merge", json={"guestSessionId": "sess-001"}, headers=GUEST_HEADERS)
        assert response.status_code == 401

    def test_nothing_to_merge(self, client, auth_headers):
        response = client.post("/api/cart/merge", json={"guestSessionId": "sess-404"}, headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["message"] == "No guest cart to merge"
        assert response.json()["data"] is None

    def test_merge(self, client, auth_headers, make_product):
        product = make_product(price=10.0)
        _add(client, product, 2)

        response = client.post("/api/cart/merge", json={"guestSessionId": "sess-001"}, headers=auth_headers())
        assert response.status_code == 200
        assert response.json()["message"] == "Carts merged successfully"
        assert response.json()["data"]["customerId"] == "user-001"
        assert response.json()["data"]["subtotal"] == 20.0

        carts = current_domain.repository_for(ShoppingCart)._dao.query.all().items
        assert len(carts) == 1
