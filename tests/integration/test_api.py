import pytest
from httpx import ASGITransport, AsyncClient

from storefront.api.deps import get_store
from storefront.core.cookies import ACCESS_TOKEN_COOKIE
from storefront.main import app
from storefront.services.auth_service import auth_service

CHECKOUT_DATA = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane@example.com",
    "address": "1 Main Street",
    "city": "Springfield",
    "state": "IL",
    "zip_code": "62701",
    "payment_method": "card",
    "agree_to_terms": True,
}

REGISTRATION = {
    "name": "Jane",
    "email": "jane@example.com",
    "password": "secret1",
    "confirm_password": "secret1",
}


@pytest.fixture
async def client(store):
    app.dependency_overrides[get_store] = lambda: store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def admin_headers(repos):
    admin = await repos.user.create(
        {"name": "Admin", "email": "admin@example.com", "hashed_password": "x", "is_admin": True},
        depth=0,
    )
    return {"Authorization": f"Bearer {auth_service.issue_token(admin)}"}


@pytest.mark.anyio
async def test_root_and_health(client):
    resp = await client.get("/")
    assert resp.status_code == 200
    assert resp.json()["status"] == "operational"

    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "healthy"


@pytest.mark.anyio
async def test_product_catalog(client, catalog):
    resp = await client.get("/api/products")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 4
    assert [p["name"] for p in body["products"]] == ["Coffee Mug", "Headphones", "Laptop", "Sold Out Lamp"]

    resp = await client.get("/api/products", params={"category": "home"})
    assert [p["name"] for p in resp.json()["products"]] == ["Coffee Mug", "Sold Out Lamp"]

    resp = await client.get("/api/products", params={"search": "head"})
    assert [p["slug"] for p in resp.json()["products"]] == ["headphones"]

    resp = await client.get("/api/products", params={"category": "garden"})
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_product_detail(client, catalog):
    resp = await client.get("/api/products/laptop")
    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 1000.0
    assert body["category"]["value"]["slug"] == "electronics"

    resp = await client.get("/api/products/nope")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_categories(client, catalog):
    resp = await client.get("/api/categories")
    assert [c["slug"] for c in resp.json()] == ["electronics", "home"]

    resp = await client.get("/api/categories/electronics")
    assert resp.status_code == 200
    assert sorted(p["value"]["name"] for p in resp.json()["products"]) == ["Headphones", "Laptop"]


@pytest.mark.anyio
async def test_protected_reads_require_sign_in(client):
    resp = await client.get("/api/cart")
    assert resp.status_code == 401
    assert resp.json()["redirect"] == "/auth"

    resp = await client.get("/api/orders")
    assert resp.status_code == 401


@pytest.mark.anyio
async def test_add_to_cart_anonymous(client, catalog):
    resp = await client.post("/api/cart/items", json={"product_id": 1, "quantity": 1})
    assert resp.status_code == 401
    body = resp.json()
    assert body["success"] is False
    assert body["message"] == "You must be signed in to add items to cart"


@pytest.mark.anyio
async def test_shopping_flow(client, store, catalog):
    laptop = catalog["products"]["Laptop"]

    resp = await client.post("/api/auth/register", json=REGISTRATION)
    assert resp.status_code == 201
    assert resp.json()["success"] is True
    assert ACCESS_TOKEN_COOKIE in resp.cookies
    assert "token" not in resp.json()

    resp = await client.get("/api/auth/me")
    assert resp.status_code == 200
    assert resp.json()["email"] == "jane@example.com"

    resp = await client.post("/api/cart/items", json={"product_id": laptop["id"], "quantity": 10})
    assert resp.status_code == 200
    assert resp.json()["message"] == "Updated cart: Laptop"

    resp = await client.get("/api/cart")
    cart = resp.json()
    assert cart["item_count"] == 5
    assert cart["total"] == 5000.0
    line_id = cart["items"][0]["id"]

    resp = await client.patch(f"/api/cart/items/{line_id}", json={"quantity": 2})
    assert resp.status_code == 200
    assert (await client.get("/api/cart")).json()["total"] == 2000.0

    resp = await client.post("/api/checkout", json=CHECKOUT_DATA)
    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["redirect"] == f"/orders/{body['order_id']}"

    resp = await client.get(f"/api/orders/{body['order_id']}")
    assert resp.status_code == 200
    order = resp.json()
    assert order["status"] == "processing"
    assert order["total"] == 2000.0
    assert "hashed_password" not in order["user"]["value"]

    resp = await client.get("/api/orders")
    assert resp.json()["total"] == 1

    resp = await client.get("/api/cart")
    assert resp.json() == {"id": None, "total": 0.0, "items": [], "item_count": 0}

    resp = await client.post("/api/auth/logout")
    assert resp.status_code == 200
    assert (await client.get("/api/auth/me")).status_code == 401


@pytest.mark.anyio
async def test_action_errors_map_to_status(client, catalog):
    await client.post("/api/auth/register", json=REGISTRATION)

    resp = await client.post("/api/cart/items", json={"product_id": 1, "quantity": 0})
    assert resp.status_code == 422
    assert resp.json()["field_errors"] == {"quantity": ["Quantity must be at least 1"]}

    resp = await client.post("/api/checkout", json=CHECKOUT_DATA)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Your cart is empty"

    resp = await client.delete("/api/cart/items/missing")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Cart item not found"

    lamp = catalog["products"]["Sold Out Lamp"]
    resp = await client.post("/api/cart/items", json={"product_id": lamp["id"], "quantity": 1})
    assert resp.status_code == 409


@pytest.mark.anyio
async def test_login(client, catalog):
    await client.post("/api/auth/register", json=REGISTRATION)
    await client.post("/api/auth/logout")

    resp = await client.post("/api/auth/login", json={"email": "jane@example.com", "password": "wrong1"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Invalid credentials"

    resp = await client.post("/api/auth/login", json={"email": "jane@example.com", "password": "secret1"})
    assert resp.status_code == 200
    assert (await client.get("/api/auth/me")).status_code == 200


@pytest.mark.anyio
async def test_other_users_order_is_not_found(client, repos, catalog, other_user):
    order = await repos.order.create({"user": other_user.id, "total": 10, "items": []})
    await client.post("/api/auth/register", json=REGISTRATION)

    resp = await client.get(f"/api/orders/{order.id}")
    assert resp.status_code == 404


@pytest.mark.anyio
async def test_admin_product_management(client, catalog, admin_headers):
    resp = await client.post(
        "/api/products",
        json={"name": "Desk Lamp", "price": 89, "inventory": 75, "category": catalog["home"]["id"]},
    )
    assert resp.status_code == 401

    resp = await client.post(
        "/api/products",
        json={"name": "Desk Lamp", "price": 89, "inventory": 75, "category": catalog["home"]["id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 201
    product = resp.json()
    assert product["slug"] == "desk-lamp"

    resp = await client.patch(f"/api/products/{product['id']}", json={"price": 79.5}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["price"] == 79.5

    resp = await client.post(
        "/api/products",
        json={"name": "Desk Lamp", "price": 89, "category": catalog["home"]["id"]},
        headers=admin_headers,
    )
    assert resp.status_code == 409

    resp = await client.post(
        "/api/products",
        json={"name": "Ghost", "price": 1, "category": 999},
        headers=admin_headers,
    )
    assert resp.status_code == 422

    resp = await client.delete(f"/api/products/{product['id']}", headers=admin_headers)
    assert resp.status_code == 200
    assert (await client.get("/api/products/desk-lamp")).status_code == 404


@pytest.mark.anyio
async def test_non_admin_cannot_manage(client, catalog):
    await client.post("/api/auth/register", json=REGISTRATION)
    resp = await client.patch("/api/orders/1/status", json={"status": "shipped"})
    assert resp.status_code == 403


@pytest.mark.anyio
async def test_admin_order_status(client, repos, user, admin_headers):
    order = await repos.order.create({"user": user.id, "total": 10, "items": []})

    resp = await client.patch(f"/api/orders/{order.id}/status", json={"status": "delivered"}, headers=admin_headers)
    assert resp.status_code == 409

    resp = await client.patch(f"/api/orders/{order.id}/status", json={"status": "cancelled"}, headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["status"] == "cancelled"
