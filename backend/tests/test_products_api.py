"""
Product and inventory ledger endpoint tests.
"""


async def _create_product(client, **overrides):
    payload = {"name": "Basic Item", "sku": "BI-001", "price": 10.0}
    payload.update(overrides)
    r = await client.post("/api/v1/products/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()["data"]


# ===================== CREATE =====================


async def test_create_product(product, brand, category):
    assert product["display_id"].startswith("PRD-")
    assert product["slug"] == "smart-watch-pro"
    assert product["sku"] == "SW-001"
    assert product["price"] == 150.0
    assert product["stock_quantity"] == 20
    assert product["is_available"] is True
    assert product["is_low_stock"] is False
    assert product["discount_percentage"] == 25.0
    assert product["brand_id"] == brand["id"]
    assert product["category_id"] == category["id"]


async def test_create_product_records_initial_stock_movement(client, product):
    r = await client.get(f"/api/v1/inventory/products/{product['id']}/movements")
    assert r.status_code == 200
    page = r.json()["data"]
    assert page["page_info"]["total_elements"] == 1
    movement = page["content"][0]
    assert movement["movement_type"] == "IN"
    assert movement["quantity"] == 20
    assert movement["reference_type"] == "initial_stock"
    assert movement["display_id"].startswith("INV-")


async def test_create_product_without_stock_has_no_movement(client):
    item = await _create_product(client)
    r = await client.get(f"/api/v1/inventory/products/{item['id']}/balance")
    data = r.json()["data"]
    assert data["movement_count"] == 0
    assert data["ledger_balance"] == 0


async def test_create_product_duplicate_sku(client, product):
    r = await client.post("/api/v1/products/", json={"name": "Other", "sku": "SW-001", "price": 5})
    assert r.status_code == 409


async def test_create_product_explicit_slug(client):
    item = await _create_product(client, slug="custom-slug")
    assert item["slug"] == "custom-slug"

    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 1, "slug": "custom-slug"})
    assert r.status_code == 409


async def test_create_product_invalid_slug(client):
    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 1, "slug": "Not A Slug"})
    assert r.status_code == 400


async def test_create_product_unknown_category_and_brand(client):
    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 1, "category_id": 999})
    assert r.status_code == 404
    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 1, "brand_id": 999})
    assert r.status_code == 404


async def test_create_product_validation(client):
    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 0})
    assert r.status_code == 400
    r = await client.post("/api/v1/products/", json={"name": "", "sku": "X-1", "price": 1})
    assert r.status_code == 400
    r = await client.post("/api/v1/products/", json={"name": "X", "sku": "X-1", "price": 1, "stock_quantity": -1})
    assert r.status_code == 400


# ===================== READ =====================


async def test_product_lookups(client, product):
    for path in (
        f"/api/v1/products/{product['id']}",
        f"/api/v1/products/display/{product['display_id']}",
        f"/api/v1/products/sku/{product['sku']}",
        f"/api/v1/products/slug/{product['slug']}",
    ):
        r = await client.get(path)
        assert r.status_code == 200, path
        assert r.json()["data"]["id"] == product["id"]

    r = await client.get("/api/v1/products/sku/NOPE")
    assert r.status_code == 404


async def test_product_search(client, product):
    r = await client.get("/api/v1/products/search", params={"query": "sw-001"})
    assert r.json()["data"]["page_info"]["total_elements"] == 1
    r = await client.get("/api/v1/products/search", params={"query": "watch"})
    assert r.json()["data"]["page_info"]["total_elements"] == 1
    r = await client.get("/api/v1/products/search", params={"query": "nothing"})
    assert r.json()["data"]["page_info"]["total_elements"] == 0


async def test_product_search_treats_wildcards_literally(client, product):
    for query in ("%", "_", "sw_001"):
        r = await client.get("/api/v1/products/search", params={"query": query})
        assert r.json()["data"]["page_info"]["total_elements"] == 0, query


async def test_products_by_category_and_brand(client, product, brand, category):
    r = await client.get(f"/api/v1/products/category/{category['id']}")
    assert r.json()["data"]["page_info"]["total_elements"] == 1
    r = await client.get(f"/api/v1/products/brand/{brand['id']}")
    assert r.json()["data"]["page_info"]["total_elements"] == 1
    r = await client.get("/api/v1/products/brand/999")
    assert r.status_code == 404


async def test_products_by_price_range(client, product):
    await _create_product(client, name="Cheap", sku="C-1", price=5)

    r = await client.get("/api/v1/products/price-range", params={"min_price": 100, "max_price": 200})
    content = r.json()["data"]["content"]
    assert [p["sku"] for p in content] == ["SW-001"]

    r = await client.get("/api/v1/products/price-range", params={"min_price": 1})
    assert [p["sku"] for p in r.json()["data"]["content"]] == ["C-1", "SW-001"]


async def test_products_by_price_range_invalid(client):
    r = await client.get("/api/v1/products/price-range", params={"min_price": 300, "max_price": 100})
    assert r.status_code == 400


async def test_featured_and_active_products(client, product):
    featured = await _create_product(client, name="Star", sku="ST-1", is_featured=True)
    await _create_product(client, name="Hidden", sku="HD-1", is_active=False)

    r = await client.get("/api/v1/products/featured")
    assert [p["id"] for p in r.json()["data"]] == [featured["id"]]

    r = await client.get("/api/v1/products/active")
    assert r.json()["data"]["page_info"]["total_elements"] == 2

    r = await client.get("/api/v1/products/")
    assert r.json()["data"]["page_info"]["total_elements"] == 3


async def test_products_health(client):
    r = await client.get("/api/v1/products/health")
    assert r.json() == {"status": "UP", "service": "products"}


# ===================== UPDATE / DELETE =====================


async def test_partial_update_product(client, product):
    r = await client.put(f"/api/v1/products/{product['id']}", json={"name": "Smart Watch Ultra", "price": 175.5})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["name"] == "Smart Watch Ultra"
    assert data["slug"] == "smart-watch-ultra"
    assert data["price"] == 175.5
    assert data["sku"] == "SW-001"
    assert data["stock_quantity"] == 20


async def test_update_product_duplicate_sku(client, product):
    other = await _create_product(client)
    r = await client.put(f"/api/v1/products/{other['id']}", json={"sku": "SW-001"})
    assert r.status_code == 409


async def test_update_product_status(client, product):
    r = await client.put(f"/api/v1/products/{product['id']}/status", json={"is_active": False})
    data = r.json()["data"]
    assert data["is_active"] is False
    assert data["is_available"] is False


async def test_update_stock_records_adjustment(client, product):
    r = await client.put(f"/api/v1/products/{product['id']}/stock", json={"stock_quantity": 3, "reason": "Count"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["stock_quantity"] == 3
    assert data["is_low_stock"] is True

    r = await client.get(f"/api/v1/inventory/products/{product['id']}/movements", params={"sort_dir": "asc", "sort_by": "id"})
    movements = r.json()["data"]["content"]
    assert [m["movement_type"] for m in movements] == ["IN", "ADJUSTMENT"]
    assert movements[1]["quantity"] == -17
    assert movements[1]["effective_quantity"] == -17
    assert movements[1]["notes"] == "Count"

    r = await client.get(f"/api/v1/inventory/products/{product['id']}/balance")
    balance = r.json()["data"]
    assert balance["ledger_balance"] == 3
    assert balance["stock_quantity"] == 3


async def test_update_stock_out_of_bounds(client, product):
    r = await client.put(f"/api/v1/products/{product['id']}/stock", json={"stock_quantity": -1})
    assert r.status_code == 400
    r = await client.put(f"/api/v1/products/{product['id']}/stock", json={"stock_quantity": 1000000})
    assert r.status_code == 400


async def test_low_and_out_of_stock_lists(client, product):
    empty = await _create_product(client, name="Empty", sku="E-1")
    r = await client.get("/api/v1/products/inventory/out-of-stock")
    assert [p["id"] for p in r.json()["data"]] == [empty["id"]]

    r = await client.get("/api/v1/products/inventory/low-stock")
    assert [p["id"] for p in r.json()["data"]] == [empty["id"]]


async def test_delete_product(client, product):
    r = await client.delete(f"/api/v1/products/{product['id']}")
    assert r.status_code == 200
    r = await client.get(f"/api/v1/products/{product['id']}")
    assert r.status_code == 404


# ===================== INVENTORY LEDGER =====================


async def test_record_outbound_movement(client, product):
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": product["id"], "movement_type": "OUT", "quantity": 5, "reference_type": "order"},
    )
    assert r.status_code == 201
    movement = r.json()["data"]
    assert movement["effective_quantity"] == -5
    assert movement["is_outbound"] is True
    assert movement["is_inbound"] is False
    assert movement["movement_type_ar"] == "خروج"

    r = await client.get(f"/api/v1/products/{product['id']}")
    assert r.json()["data"]["stock_quantity"] == 15

    r = await client.get(f"/api/v1/inventory/movements/{movement['id']}")
    assert r.json()["data"]["id"] == movement["id"]


async def test_record_adjustment_can_be_negative(client, product):
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": product["id"], "movement_type": "ADJUSTMENT", "quantity": -4},
    )
    assert r.status_code == 201
    movement = r.json()["data"]
    assert movement["effective_quantity"] == -4
    assert movement["is_inbound"] is False
    assert movement["is_outbound"] is False


async def test_ledger_balance_matches_stock(client, product):
    for movement_type, quantity in [("RESERVED", 6), ("RELEASED", 2), ("IN", 10), ("ADJUSTMENT", -1)]:
        r = await client.post(
            "/api/v1/inventory/movements",
            json={"product_id": product["id"], "movement_type": movement_type, "quantity": quantity},
        )
        assert r.status_code == 201

    r = await client.get(f"/api/v1/inventory/products/{product['id']}/balance")
    balance = r.json()["data"]
    assert balance["stock_quantity"] == 25
    assert balance["ledger_balance"] == 25
    assert balance["movement_count"] == 5


async def test_enabling_tracking_reconciles_ledger(client):
    item = await _create_product(client, stock_quantity=10, track_inventory=False)
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": item["id"], "movement_type": "IN", "quantity": 4},
    )
    assert r.status_code == 201

    r = await client.put(f"/api/v1/products/{item['id']}", json={"track_inventory": True})
    assert r.status_code == 200
    assert r.json()["data"]["stock_quantity"] == 10

    r = await client.get(f"/api/v1/inventory/products/{item['id']}/balance")
    balance = r.json()["data"]
    assert balance["ledger_balance"] == 10
    assert balance["stock_quantity"] == 10
    assert balance["movement_count"] == 2

    r = await client.get(f"/api/v1/inventory/products/{item['id']}/movements", params={"sort_by": "id", "sort_dir": "asc"})
    adjustment = r.json()["data"]["content"][-1]
    assert adjustment["movement_type"] == "ADJUSTMENT"
    assert adjustment["quantity"] == 6
    assert adjustment["reference_type"] == "tracking_enabled"

    # sin desfase no se registra un nuevo ajuste
    await client.put(f"/api/v1/products/{item['id']}", json={"track_inventory": False})
    await client.put(f"/api/v1/products/{item['id']}", json={"track_inventory": True})
    r = await client.get(f"/api/v1/inventory/products/{item['id']}/balance")
    assert r.json()["data"]["movement_count"] == 2


async def test_movement_insufficient_stock(client, product):
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": product["id"], "movement_type": "OUT", "quantity": 100},
    )
    assert r.status_code == 400

    r = await client.get(f"/api/v1/products/{product['id']}")
    assert r.json()["data"]["stock_quantity"] == 20


async def test_movement_validation(client, product):
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": product["id"], "movement_type": "IN", "quantity": -3},
    )
    assert r.status_code == 400
    r = await client.post(
        "/api/v1/inventory/movements",
        json={"product_id": product["id"], "movement_type": "IN", "quantity": 0},
    )
    assert r.status_code == 400


async def test_movement_unknown_product(client):
    r = await client.post("/api/v1/inventory/movements", json={"product_id": 999, "movement_type": "IN", "quantity": 1})
    assert r.status_code == 404
    r = await client.get("/api/v1/inventory/movements/999")
    assert r.status_code == 404
