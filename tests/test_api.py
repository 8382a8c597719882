"""
HTTP tests for the API, backed by the in-memory store.

Tokens are obtained through the real sign-in endpoint, so every
authenticated call runs the same passive restore production does.
"""

from __future__ import annotations

PASSWORD = "secret-pass"


def _sign_in(api_client, email: str, password: str = PASSWORD):
    return api_client.post("/api/v1/auth/sign-in", json={"email": email, "password": password})


def _headers(api_client, email: str, password: str = PASSWORD) -> dict:
    response = _sign_in(api_client, email, password)
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_health_and_root(api_client) -> None:
    assert api_client.get("/health").json()["status"] == "healthy"
    assert api_client.get("/").json()["health"] == "/health"


# ----------------------------------------------------------------------------
# Auth
# ----------------------------------------------------------------------------

def test_sign_in_returns_tokens_and_profile(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)

    response = _sign_in(api_client, "buyer@example.com")

    assert response.status_code == 200
    body = response.json()
    assert body["access_token"]
    assert body["profile"]["email"] == "buyer@example.com"
    assert body["profile"]["role"] == "client"


def test_sign_in_with_wrong_password_is_401(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)

    response = _sign_in(api_client, "buyer@example.com", "wrong")

    assert response.status_code == 401
    assert response.json()["detail"]["error"] == "credential_rejected"


def test_blocked_client_sign_in_is_403(api_client, store) -> None:
    store.register_user("blocked@example.com", PASSWORD, status="blocked")

    response = _sign_in(api_client, "blocked@example.com")

    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "account_blocked"
    assert store.auth.current is None


def test_register_then_register_again(api_client, store) -> None:
    payload = {"email": "new@example.com", "password": PASSWORD, "full_name": "Nora New"}

    first = api_client.post("/api/v1/auth/register", json=payload)
    second = api_client.post("/api/v1/auth/register", json=payload)

    assert first.status_code == 201
    assert first.json()["outcome"] == "created"
    assert second.status_code == 409
    assert second.json()["detail"]["error"] == "already_exists"
    assert len(store.tables["profiles"]) == 1


def test_register_reactivates_deleted_account(api_client, store) -> None:
    store.register_user("gone@example.com", PASSWORD, status="deleted")

    response = api_client.post(
        "/api/v1/auth/register",
        json={"email": "gone@example.com", "password": PASSWORD, "full_name": "Back Again"},
    )

    assert response.status_code == 201
    assert response.json()["outcome"] == "reactivated"
    assert _sign_in(api_client, "gone@example.com").status_code == 200


def test_session_restore_and_sign_out(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)
    headers = _headers(api_client, "buyer@example.com")

    restored = api_client.get("/api/v1/auth/session", headers=headers)
    signed_out = api_client.post("/api/v1/auth/sign-out", headers=headers)
    after = api_client.get("/api/v1/auth/session", headers=headers)

    assert restored.status_code == 200
    assert restored.json()["profile"]["email"] == "buyer@example.com"
    assert signed_out.status_code == 200
    assert signed_out.json()["signed_out"] is True
    assert after.status_code == 401


def test_sign_out_succeeds_when_provider_fails(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)
    headers = _headers(api_client, "buyer@example.com")
    store.auth.fail_sign_out = True

    response = api_client.post("/api/v1/auth/sign-out", headers=headers)

    assert response.status_code == 200
    assert response.json()["signed_out"] is True


def test_missing_bearer_is_401(api_client) -> None:
    assert api_client.get("/api/v1/orders").status_code == 401
    assert api_client.get("/api/v1/orders", headers={"Authorization": "Token abc"}).status_code == 401


# ----------------------------------------------------------------------------
# Admin effects on live sessions
# ----------------------------------------------------------------------------

def test_blocking_a_client_ends_their_next_request(api_client, store) -> None:
    _, client_row = store.register_user("buyer@example.com", PASSWORD)
    store.register_user("admin@example.com", PASSWORD, role="admin")
    client_headers = _headers(api_client, "buyer@example.com")
    admin_headers = _headers(api_client, "admin@example.com")

    blocked = api_client.patch(
        f"/api/v1/admin/clients/{client_row['id']}/status",
        json={"status": "blocked"},
        headers=admin_headers,
    )
    response = api_client.get("/api/v1/orders", headers=client_headers)

    assert blocked.status_code == 200
    assert blocked.json()["status"] == "blocked"
    assert response.status_code == 403
    assert response.json()["detail"]["error"] == "account_blocked"
    assert api_client.get("/api/v1/orders", headers=client_headers).status_code == 401


def test_admin_cannot_assign_deleted_status(api_client, store) -> None:
    _, client_row = store.register_user("buyer@example.com", PASSWORD)
    store.register_user("admin@example.com", PASSWORD, role="admin")
    admin_headers = _headers(api_client, "admin@example.com")

    response = api_client.patch(
        f"/api/v1/admin/clients/{client_row['id']}/status",
        json={"status": "deleted"},
        headers=admin_headers,
    )

    assert response.status_code == 422


def test_soft_deleted_client_cannot_sign_in(api_client, store) -> None:
    _, client_row = store.register_user("buyer@example.com", PASSWORD)
    store.register_user("admin@example.com", PASSWORD, role="admin")
    admin_headers = _headers(api_client, "admin@example.com")

    deleted = api_client.delete(f"/api/v1/admin/clients/{client_row['id']}", headers=admin_headers)
    listed = api_client.get("/api/v1/admin/clients", headers=admin_headers)

    assert deleted.status_code == 200
    assert deleted.json()["status"] == "deleted"
    assert listed.json() == []
    assert _sign_in(api_client, "buyer@example.com").status_code == 403


def test_client_cannot_reach_admin_endpoints(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)
    headers = _headers(api_client, "buyer@example.com")

    assert api_client.get("/api/v1/admin/clients", headers=headers).status_code == 403
    assert api_client.get("/api/v1/admin/dashboard", headers=headers).status_code == 403


# ----------------------------------------------------------------------------
# Catalog, orders, documents, dashboards
# ----------------------------------------------------------------------------

def test_public_catalog_lists_active_products_only(api_client, store) -> None:
    store.seed_product("Tea")
    store.seed_product("Retired", is_active=False)

    response = api_client.get("/api/v1/products")

    assert response.status_code == 200
    assert [product["name"] for product in response.json()] == ["Tea"]


def test_admin_product_lifecycle(api_client, store) -> None:
    store.register_user("admin@example.com", PASSWORD, role="admin")
    headers = _headers(api_client, "admin@example.com")

    created = api_client.post(
        "/api/v1/admin/products",
        json={"name": "Olive oil", "price": "12.50", "stock_quantity": 4},
        headers=headers,
    )
    product_id = created.json()["id"]
    updated = api_client.patch(f"/api/v1/admin/products/{product_id}", json={"stock_quantity": 9}, headers=headers)
    toggled = api_client.post(f"/api/v1/admin/products/{product_id}/toggle", headers=headers)
    deleted = api_client.delete(f"/api/v1/admin/products/{product_id}", headers=headers)
    missing = api_client.delete(f"/api/v1/admin/products/{product_id}", headers=headers)

    assert created.status_code == 201
    assert updated.json()["stock_quantity"] == 9
    assert toggled.json()["is_active"] is False
    assert deleted.status_code == 204
    assert missing.status_code == 404


def test_invalid_product_is_422(api_client, store) -> None:
    store.register_user("admin@example.com", PASSWORD, role="admin")
    headers = _headers(api_client, "admin@example.com")

    response = api_client.post(
        "/api/v1/admin/products",
        json={"name": "Bad", "price": "-3"},
        headers=headers,
    )

    assert response.status_code == 422


def test_product_image_upload(api_client, store) -> None:
    store.register_user("admin@example.com", PASSWORD, role="admin")
    headers = _headers(api_client, "admin@example.com")

    ok = api_client.post(
        "/api/v1/admin/products/images",
        files={"file": ("shot.png", b"\x89PNG....", "image/png")},
        headers=headers,
    )
    rejected = api_client.post(
        "/api/v1/admin/products/images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=headers,
    )

    assert ok.status_code == 201
    assert "/product-images/" in ok.json()["url"]
    assert rejected.status_code == 400


def test_client_sees_own_orders_with_items(api_client, store) -> None:
    _, mine = store.register_user("buyer@example.com", PASSWORD)
    _, other = store.register_user("other@example.com", PASSWORD)
    product = store.seed_product("Tea", image_url="https://img.example/tea.png")
    store.seed_order(
        mine["id"],
        items=[{"product_id": product["id"], "quantity": 2, "unit_price": 3.5, "total_price": 7.0}],
    )
    store.seed_order(other["id"])
    headers = _headers(api_client, "buyer@example.com")

    response = api_client.get("/api/v1/orders", headers=headers)

    assert response.status_code == 200
    [order] = response.json()
    assert order["client_id"] == mine["id"]
    assert order["items"][0]["product_name"] == "Tea"
    assert order["items"][0]["quantity"] == 2


def test_admin_updates_order_status(api_client, store) -> None:
    _, mine = store.register_user("buyer@example.com", PASSWORD)
    store.register_user("admin@example.com", PASSWORD, role="admin")
    order = store.seed_order(mine["id"])
    headers = _headers(api_client, "admin@example.com")

    response = api_client.patch(
        f"/api/v1/admin/orders/{order['id']}/status",
        json={"order_status": "shipped", "payment_status": "paid"},
        headers=headers,
    )
    empty = api_client.patch(f"/api/v1/admin/orders/{order['id']}/status", json={}, headers=headers)
    invalid = api_client.patch(
        f"/api/v1/admin/orders/{order['id']}/status",
        json={"order_status": "teleported"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.json()["order_status"] == "shipped"
    assert response.json()["payment_status"] == "paid"
    assert empty.status_code == 422
    assert invalid.status_code == 422


def test_documents_visibility_and_publishing(api_client, store) -> None:
    store.register_user("buyer@example.com", PASSWORD)
    _, admin_row = store.register_user("admin@example.com", PASSWORD, role="admin")
    store.seed_document("Internal", uploaded_by=admin_row["id"], is_public=False)
    admin_headers = _headers(api_client, "admin@example.com")

    created = api_client.post(
        "/api/v1/admin/documents",
        json={"title": "Price list", "file_url": "https://files.example/prices.pdf"},
        headers=admin_headers,
    )
    all_documents = api_client.get("/api/v1/admin/documents", headers=admin_headers)
    client_documents = api_client.get("/api/v1/documents", headers=_headers(api_client, "buyer@example.com"))

    assert created.status_code == 201
    assert created.json()["uploaded_by"] == admin_row["id"]
    assert len(all_documents.json()) == 2
    assert [document["title"] for document in client_documents.json()] == ["Price list"]


def test_document_upload_and_delete(api_client, store) -> None:
    _, admin_row = store.register_user("admin@example.com", PASSWORD, role="admin")
    document = store.seed_document("Old", uploaded_by=admin_row["id"])
    headers = _headers(api_client, "admin@example.com")

    uploaded = api_client.post(
        "/api/v1/admin/documents/upload",
        files={"file": ("terms.pdf", b"%PDF-1.7", "application/pdf")},
        headers=headers,
    )
    deleted = api_client.delete(f"/api/v1/admin/documents/{document['id']}", headers=headers)

    assert uploaded.status_code == 201
    assert "/documents/" in uploaded.json()["url"]
    assert deleted.status_code == 204
    assert store.tables["documents"] == []


def test_dashboards(api_client, store) -> None:
    _, mine = store.register_user("buyer@example.com", PASSWORD)
    store.register_user("admin@example.com", PASSWORD, role="admin")
    store.seed_order(mine["id"], order_status="delivered", payment_status="paid", total_amount=30)

    client_stats = api_client.get("/api/v1/dashboard", headers=_headers(api_client, "buyer@example.com"))
    admin_stats = api_client.get("/api/v1/admin/dashboard", headers=_headers(api_client, "admin@example.com"))

    assert client_stats.json()["completed_orders"] == 1
    assert admin_stats.json()["total_clients"] == 1
    assert float(admin_stats.json()["total_revenue"]) == 30.0
