"""Pruebas de productos"""
from app.api.api_v1.endpoints import products
from app.core.config import settings


def test_admin_creates_product(client, admin, admin_headers):
    response = client.post(
        "/products",
        json={"name": "Batería Samsung A10", "price": 45.5, "stock": 12, "sku": "BAT-A10", "category": "baterias"},
        headers=admin_headers,
    )

    assert response.status_code == 201
    body = response.json()
    assert body["price"] == 45.5
    assert body["low_stock"] is False
    assert body["created_by"] == admin["id"]


def test_staff_can_read_but_not_write(client, seller_headers, product_factory):
    product = product_factory()

    assert client.get(f"/products/{product['id']}", headers=seller_headers).status_code == 200
    assert client.get("/products", headers=seller_headers).status_code == 200
    assert client.post("/products", json={"name": "X", "price": 1}, headers=seller_headers).status_code == 403
    assert client.patch(f"/products/{product['id']}", json={"stock": 1}, headers=seller_headers).status_code == 403
    assert client.delete(f"/products/{product['id']}", headers=seller_headers).status_code == 403


def test_price_must_be_positive(client, admin_headers):
    response = client.post("/products", json={"name": "Gratis", "price": 0}, headers=admin_headers)
    assert response.status_code == 422


def test_stock_cannot_be_negative(client, admin_headers):
    response = client.post("/products", json={"name": "Raro", "price": 5, "stock": -1}, headers=admin_headers)
    assert response.status_code == 422


def test_duplicate_sku(client, admin_headers, product_factory):
    product_factory(sku="CAB-USB")

    response = client.post(
        "/products", json={"name": "Otro cable", "price": 10, "sku": "CAB-USB"}, headers=admin_headers
    )

    assert response.status_code == 409


def test_update_with_taken_sku(client, admin_headers, product_factory):
    product_factory(sku="CAB-USB")
    other = product_factory(name="Cargador", sku="CAR-20W")

    response = client.patch(f"/products/{other['id']}", json={"sku": "CAB-USB"}, headers=admin_headers)

    assert response.status_code == 409


def test_update(client, admin_headers, product_factory):
    product = product_factory()

    response = client.patch(
        f"/products/{product['id']}", json={"price": 99.9, "stock": 1}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["price"] == 99.9
    assert response.json()["low_stock"] is True


def test_null_required_fields_are_ignored(client, admin_headers, product_factory):
    product = product_factory(price=80.0, stock=4)

    response = client.patch(
        f"/products/{product['id']}",
        json={"name": None, "price": None, "stock": None, "description": "Original"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["name"] == product["name"]
    assert body["price"] == 80.0
    assert body["stock"] == 4
    assert body["description"] == "Original"


def test_sku_taken_at_commit_is_conflict(client, admin_headers, product_factory, monkeypatch):
    product_factory(sku="CAB-USB")

    async def skip_check(db, sku, exclude_id=None):
        return None

    monkeypatch.setattr(products, "_ensure_unique_sku", skip_check)
    response = client.post(
        "/products", json={"name": "Otro cable", "price": 10, "sku": "CAB-USB"}, headers=admin_headers
    )

    assert response.status_code == 409


def test_filters(client, admin_headers, product_factory):
    product_factory(name="Pantalla iPhone", category="pantallas", stock=settings.LOW_STOCK_THRESHOLD)
    product_factory(name="Mica templada", category="accesorios", stock=50)

    low = client.get("/products", params={"low_stock": True}, headers=admin_headers).json()
    assert [p["name"] for p in low["data"]] == ["Pantalla iPhone"]

    by_category = client.get("/products", params={"category": "accesorios"}, headers=admin_headers).json()
    assert [p["name"] for p in by_category["data"]] == ["Mica templada"]

    search = client.get("/products", params={"search": "iphone"}, headers=admin_headers).json()
    assert search["total"] == 1


def test_get_missing(client, admin_headers):
    assert client.get("/products/404", headers=admin_headers).status_code == 404


def test_delete(client, admin_headers, product_factory):
    product = product_factory()

    assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/products/{product['id']}", headers=admin_headers).status_code == 404


def test_sold_product_cannot_be_deleted(client, admin_headers, seller_headers, product_factory):
    product = product_factory()
    client.post("/orders", json={"products": [{"product_id": product["id"], "quantity": 1}]}, headers=seller_headers)

    assert client.delete(f"/products/{product['id']}", headers=admin_headers).status_code == 400
