import json

import pytest
from fastapi.testclient import TestClient

from mappify import DatabaseEngine
from main import create_app


@pytest.fixture
def client():
    app = create_app(DatabaseEngine(":memory:", log_sql=False))
    with TestClient(app) as client:
        yield client


def _seed(client):
    tools = client.post("/api/categories", json={"name": "tools"}).json()
    for name, price in [("Hammer", 12.5), ("Saw", 30.0), ("Drill", 99.0)]:
        client.post("/api/products", json={"name": name, "price": price, "category_id": tools["id"]})
    return tools


def test_create_and_get_product(client):
    response = client.post("/api/products", json={"name": "Hammer", "price": 12.5})
    assert response.status_code == 201
    body = response.json()
    assert body["id"] == 1
    assert body["stock"] == 0

    response = client.get("/api/products/1")
    assert response.status_code == 200
    assert response.json()["name"] == "Hammer"
    assert client.get("/api/products/2").status_code == 404


def test_list_with_where_filter(client):
    _seed(client)
    where = json.dumps({"price": {"between": [10, 50]}})
    names = [p["name"] for p in client.get("/api/products", params={"where": where}).json()]
    assert names == ["Hammer", "Saw"]

    page = client.get("/api/products", params={"limit": 2, "offset": 2, "order": "price DESC"}).json()
    assert [p["name"] for p in page] == ["Hammer"]


def test_bad_filters_are_422(client):
    assert client.get("/api/products", params={"where": "{not json"}).status_code == 422
    assert client.get("/api/products", params={"where": '{"price": {"foo": 1}}'}).status_code == 422
    assert client.get("/api/products", params={"limit": 2}).status_code == 422


def test_update_and_delete(client):
    _seed(client)
    response = client.put("/api/products/2", json={"price": 35.0})
    assert response.status_code == 200
    assert response.json()["price"] == 35.0
    assert client.put("/api/products/42", json={"price": 1}).status_code == 404

    assert client.delete("/api/products/2").status_code == 200
    assert client.delete("/api/products/2").status_code == 404


def test_category_products_and_find_or_create(client):
    tools = _seed(client)
    again = client.post("/api/categories", json={"name": "tools"}).json()
    assert again["id"] == tools["id"]
    assert again["created"] is False
    assert tools["created"] is True

    products = client.get(f"/api/categories/{tools['id']}/products").json()
    assert [p["name"] for p in products] == ["Hammer", "Saw", "Drill"]
    assert all("category_id" not in p for p in products)
    assert client.get("/api/categories/99/products").status_code == 404


def test_product_tags(client):
    _seed(client)
    assert client.get("/api/products/1/tags").json() == []
