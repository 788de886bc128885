import json

from product_service.core_settings import get_settings

JSON_API = "application/vnd.api+json"
HEADERS = {"Content-Type": JSON_API, "Accept": JSON_API}


def jsonapi_body(attributes, resource_id=None):
    data = {"type": "products", "attributes": attributes}
    if resource_id is not None:
        data["id"] = str(resource_id)
    return json.dumps({"data": data})


def test_create_product_returns_201_with_location(client):
    resp = client.post(
        "/api/v1/products",
        content=jsonapi_body({"name": "Widget", "price": 9.99}),
        headers=HEADERS,
    )
    assert resp.status_code == 201
    assert resp.headers["content-type"].startswith(JSON_API)

    data = resp.json()["data"]
    assert data["type"] == "products"
    assert resp.headers["Location"].endswith(f"/api/v1/products/{data['id']}")

    fetched = client.get(f"/api/v1/products/{data['id']}")
    assert fetched.status_code == 200
    attributes = fetched.json()["data"]["attributes"]
    assert attributes == {"name": "Widget", "price": 9.99}


def test_create_product_malformed_json_returns_400(client):
    resp = client.post(
        "/api/v1/products",
        content='{"data": {"type": "products", "attributes": {"name": "Widget"',
        headers=HEADERS,
    )
    assert resp.status_code == 400
    assert resp.json()["errors"][0]["status"] == "400"


def test_create_product_negative_price_returns_400(client):
    resp = client.post(
        "/api/v1/products",
        content=jsonapi_body({"name": "Widget", "price": -50.0}),
        headers=HEADERS,
    )
    assert resp.status_code == 400


def test_get_missing_product_returns_404(client):
    resp = client.get("/api/v1/products/999")
    assert resp.status_code == 404
    error = resp.json()["errors"][0]
    assert error["status"] == "404"
    assert error["code"] == "not_found"


def test_update_product_merges_present_attributes(client, create_product):
    product = create_product("Widget", 9.99)

    resp = client.put(
        f"/api/v1/products/{product['id']}",
        content=jsonapi_body({"price": 150.0}, resource_id=product["id"]),
        headers=HEADERS,
    )
    assert resp.status_code == 200
    assert resp.json()["data"]["attributes"] == {"name": "Widget", "price": 150.0}


def test_update_product_id_mismatch_returns_400(client, create_product):
    product = create_product()
    other_id = int(product["id"]) + 1

    resp = client.put(
        f"/api/v1/products/{product['id']}",
        content=jsonapi_body({"name": "Renamed"}, resource_id=other_id),
        headers=HEADERS,
    )
    assert resp.status_code == 400


def test_update_product_without_payload_id_returns_400(client, create_product):
    product = create_product()

    resp = client.put(
        f"/api/v1/products/{product['id']}",
        content=jsonapi_body({"name": "Renamed"}),
        headers=HEADERS,
    )
    assert resp.status_code == 400


def test_update_missing_product_returns_404(client):
    resp = client.put(
        "/api/v1/products/99",
        content=jsonapi_body({"name": "Anything", "price": 10.0}, resource_id=99),
        headers=HEADERS,
    )
    assert resp.status_code == 404


def test_update_product_malformed_json_returns_400(client):
    resp = client.put(
        "/api/v1/products/1",
        content='{ "data": { "type": "products", "attributes": { "name": "Test", "price": 100.0 }',
        headers=HEADERS,
    )
    assert resp.status_code == 400


def test_delete_product(client, create_product):
    product = create_product()

    resp = client.delete(f"/api/v1/products/{product['id']}")
    assert resp.status_code == 204
    assert client.get(f"/api/v1/products/{product['id']}").status_code == 404


def test_delete_missing_product_returns_404(client):
    assert client.delete("/api/v1/products/99").status_code == 404


def test_list_products_paginates_with_links(client, create_product):
    for i in range(3):
        create_product(f"Product {i}", 1.0 + i)

    first = client.get("/api/v1/products", params={"page": 0, "size": 2}).json()
    assert [p["attributes"]["name"] for p in first["data"]] == ["Product 0", "Product 1"]
    assert first["meta"] == {"totalPages": 2, "totalElements": 3, "currentPage": 0, "pageSize": 2}
    assert first["links"]["self"].endswith("/api/v1/products?page=0&size=2")
    assert first["links"]["first"].endswith("?page=0&size=2")
    assert first["links"]["prev"] is None
    assert first["links"]["next"].endswith("?page=1&size=2")
    assert first["links"]["last"].endswith("?page=1&size=2")

    second = client.get("/api/v1/products", params={"page": 1, "size": 2}).json()
    assert len(second["data"]) == 1
    assert second["links"]["prev"].endswith("?page=0&size=2")
    assert second["links"]["next"] is None


def test_list_products_empty(client):
    body = client.get("/api/v1/products").json()
    assert body["data"] == []
    assert body["meta"]["totalPages"] == 0
    assert body["meta"]["pageSize"] == 10
    assert body["links"]["last"] is None
    assert body["links"]["next"] is None


def test_list_products_far_past_the_end_is_empty(client, create_product):
    create_product("Only", 1.0)

    resp = client.get("/api/v1/products", params={"page": 10**18, "size": 100})

    assert resp.status_code == 200
    body = resp.json()
    assert body["data"] == []
    assert body["meta"]["currentPage"] == 10**18
    assert body["meta"]["totalElements"] == 1
    assert body["links"]["next"] is None
    assert body["links"]["last"].endswith("?page=0&size=100")


def test_list_products_rejects_negative_page(client):
    assert client.get("/api/v1/products", params={"page": -1}).status_code == 400


def test_api_key_required_when_configured(client, monkeypatch):
    monkeypatch.setattr(get_settings(), "PRODUCTS_API_KEY", "secret")

    assert client.get("/api/v1/products").status_code == 401
    assert client.get("/api/v1/products", headers={"X-API-KEY": "wrong"}).status_code == 401
    assert client.get("/api/v1/products", headers={"X-API-KEY": "secret"}).status_code == 200


def test_health_endpoints(client):
    assert client.get("/health").json()["service"] == "product-service"
    assert client.get("/health/live").json() == {"status": "alive"}


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/products", headers={"X-Request-ID": "req-123"})
    assert resp.headers["X-Request-ID"] == "req-123"
