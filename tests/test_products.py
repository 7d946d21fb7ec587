"""
Tests for product endpoints.
"""
import json
import uuid

import pytest

from shopkeep.core.users import Role


class TestProductReads:
    """Tests for listing and detail, gated by the API key."""

    def test_list_requires_api_key(self, client):
        response = client.get("/products")

        assert response.status_code == 403
        assert response.json()["error"]["message"] == "Invalid API key"

    def test_list_seeded_products(self, client, api_key):
        response = client.get("/products", headers={"x-api-key": api_key})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert [p["sku"] for p in body["data"]] == ["SKU-0001"]
        assert body["meta"] == {"page": 1, "limit": 10, "total": 1}

    def test_pagination_meta(self, client, api_key, editor_headers, mouse):
        for n in range(2, 6):
            client.post("/products", json={**mouse, "sku": f"SKU-000{n}"}, headers=editor_headers)

        response = client.get("/products?page=2&limit=2", headers={"x-api-key": api_key})

        body = response.json()
        assert [p["sku"] for p in body["data"]] == ["SKU-0003", "SKU-0004"]
        assert body["meta"] == {"page": 2, "limit": 2, "total": 5}
        assert body["path"] == "/products?page=2&limit=2"

    @pytest.mark.parametrize(
        "query, page, limit",
        [("page=0&limit=0", 1, 1), ("page=abc&limit=xyz", 1, 10), ("page=-4", 1, 10), ("limit=5items", 1, 5)],
    )
    def test_lenient_pagination_params(self, client, api_key, query, page, limit):
        response = client.get(f"/products?{query}", headers={"x-api-key": api_key})

        assert response.status_code == 200
        meta = response.json()["meta"]
        assert (meta["page"], meta["limit"]) == (page, limit)

    def test_out_of_range_page(self, client, api_key):
        response = client.get("/products?page=50", headers={"x-api-key": api_key})

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_get_by_id(self, client, api_key):
        listed = client.get("/products", headers={"x-api-key": api_key}).json()["data"][0]

        response = client.get(f"/products/{listed['id']}", headers={"x-api-key": api_key})

        assert response.status_code == 200
        assert response.json()["data"] == listed

    def test_get_unknown_id(self, client, api_key):
        response = client.get(f"/products/{uuid.uuid4()}", headers={"x-api-key": api_key})

        assert response.status_code == 404
        error = response.json()["error"]
        assert error["code"] == "NOT_FOUND"
        assert error["message"] == "Product not found"

    def test_bearer_token_is_not_an_api_key(self, client, admin_headers):
        response = client.get("/products", headers=admin_headers)

        assert response.status_code == 403


class TestProductWrites:
    """Tests for create, update and delete, gated by token and role."""

    def test_editor_scenario(self, client, editor_headers, mouse):
        """Create as editor, repeat for a conflict, then fail to delete as editor."""
        created = client.post("/products", json=mouse, headers=editor_headers)

        assert created.status_code == 201
        data = created.json()["data"]
        assert {k: data[k] for k in mouse} == mouse
        assert uuid.UUID(data["id"])

        repeated = client.post("/products", json=mouse, headers=editor_headers)
        assert repeated.status_code == 409
        assert repeated.json()["error"]["code"] == "CONFLICT"

        deleted = client.delete(f"/products/{data['id']}", headers=editor_headers)
        assert deleted.status_code == 403
        assert deleted.json()["error"]["message"] == "Insufficient permissions"

    def test_admin_delete(self, client, api_key, admin_headers, mouse):
        product_id = client.post("/products", json=mouse, headers=admin_headers).json()["data"]["id"]

        first = client.delete(f"/products/{product_id}", headers=admin_headers)
        assert first.status_code == 204
        assert first.content == b""

        second = client.delete(f"/products/{product_id}", headers=admin_headers)
        assert second.status_code == 404

        gone = client.get(f"/products/{product_id}", headers={"x-api-key": api_key})
        assert gone.status_code == 404

    def test_create_without_token(self, client, api_key, mouse):
        response = client.post("/products", json=mouse, headers={"x-api-key": api_key})

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Missing token"

    def test_create_with_invalid_token(self, client, mouse):
        response = client.post(
            "/products", json=mouse, headers={"Authorization": "Bearer not.a.token"}
        )

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid or expired token"

    def test_create_with_expired_token(self, app, client, mouse):
        token = app.state.services.tokens.issue(
            {"sub": "u1", "role": "admin", "username": "alice"}, expires_in=-30
        )

        response = client.post("/products", json=mouse, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_token_from_other_app_rejected(self, settings, client, mouse):
        from shopkeep.app import create_app

        other = create_app(settings)
        token = other.state.services.tokens.issue({"sub": "u1", "role": "admin", "username": "alice"})

        response = client.post("/products", json=mouse, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_viewer_cannot_create(self, app, client, mouse):
        token = app.state.services.tokens.issue(
            {"sub": "u9", "role": Role.VIEWER.value, "username": "vic"}
        )

        response = client.post("/products", json=mouse, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 403

    def test_gate_failure_skips_validation(self, client):
        """Test that an unauthenticated invalid body reports the auth failure."""
        response = client.post("/products", json={"price": -1})

        assert response.status_code == 401

    def test_validation_errors(self, client, editor_headers, mouse):
        response = client.post(
            "/products", json={**mouse, "price": 0, "stock": 2.5}, headers=editor_headers
        )

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "UNPROCESSABLE_ENTITY"
        assert [d["field"] for d in error["details"]] == ["price", "stock"]

    def test_empty_body(self, client, editor_headers):
        response = client.post("/products", headers=editor_headers)

        assert response.status_code == 422
        fields = [d["field"] for d in response.json()["error"]["details"]]
        assert fields == ["name", "sku", "price", "stock", "category"]

    def test_partial_update(self, client, editor_headers, mouse):
        product = client.post("/products", json=mouse, headers=editor_headers).json()["data"]

        response = client.put(
            f"/products/{product['id']}", json={"stock": 3}, headers=editor_headers
        )

        assert response.status_code == 200
        assert response.json()["data"] == {**product, "stock": 3}

    def test_update_to_taken_sku(self, client, editor_headers, mouse):
        product = client.post("/products", json=mouse, headers=editor_headers).json()["data"]

        response = client.put(
            f"/products/{product['id']}", json={"sku": "SKU-0001"}, headers=editor_headers
        )

        assert response.status_code == 409

    def test_update_invalid(self, client, editor_headers, mouse):
        product = client.post("/products", json=mouse, headers=editor_headers).json()["data"]

        response = client.put(
            f"/products/{product['id']}", json={"price": -5}, headers=editor_headers
        )

        assert response.status_code == 422
        assert [d["field"] for d in response.json()["error"]["details"]] == ["price"]

    def test_update_unknown(self, client, admin_headers):
        response = client.put(f"/products/{uuid.uuid4()}", json={"stock": 1}, headers=admin_headers)

        assert response.status_code == 404

    def test_non_object_body(self, client, editor_headers):
        response = client.post("/products", json=[1, 2, 3], headers=editor_headers)

        assert response.status_code == 422
        assert response.json()["success"] is False

    def test_writes_are_persisted(self, settings, client, editor_headers, mouse):
        product = client.post("/products", json=mouse, headers=editor_headers).json()["data"]

        records = json.loads(settings.products_file.read_text())

        assert product in records

    def test_text_fields_echoed_unchanged(self, client, editor_headers, mouse):
        response = client.post(
            "/products",
            json={**mouse, "name": "Tom & Jerry", "category": "a < b"},
            headers=editor_headers,
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["name"] == "Tom & Jerry"
        assert data["category"] == "a < b"
