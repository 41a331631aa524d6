"""
API endpoint tests: root, security, response envelope, brands and categories.
Uses in-memory SQLite + dependency-overridden FastAPI test client.
"""
from multistore.main import rate_limiter


# ===================== HEALTH / ROOT =====================


async def test_root(unauth_client):
    r = await unauth_client.get("/")
    assert r.status_code == 200
    assert "Multistore" in r.json()["message"]


async def test_health(unauth_client):
    r = await unauth_client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "healthy"}


# ===================== API KEY =====================


async def test_missing_api_key_is_rejected(unauth_client):
    r = await unauth_client.get("/api/v1/brands/")
    assert r.status_code == 401
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Invalid API Key"
    assert body["message_ar"] == "مفتاح API غير صحيح"


async def test_wrong_api_key_is_rejected(unauth_client):
    r = await unauth_client.get("/api/v1/brands/", headers={"X-API-Key": "nope"})
    assert r.status_code == 401


async def test_bearer_api_key_is_accepted(unauth_client):
    from multistore.core.config import settings

    r = await unauth_client.get("/api/v1/brands/", headers={"Authorization": f"Bearer {settings.API_KEY}"})
    assert r.status_code == 200


# ===================== ENVELOPE / RATE LIMIT HEADERS =====================


async def test_success_envelope_and_rate_limit_headers(client):
    r = await client.get("/api/v1/brands/")
    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["status_code"] == 200
    assert len(body["request_id"]) == 8
    assert "X-RateLimit-Limit" in r.headers
    assert "X-RateLimit-Remaining" in r.headers
    assert "X-RateLimit-Reset" in r.headers


async def test_rate_limit_exceeded_returns_429(client, monkeypatch):
    monkeypatch.setattr(rate_limiter, "limit", 2)

    for _ in range(2):
        r = await client.get("/api/v1/brands/")
        assert r.status_code == 200

    r = await client.get("/api/v1/brands/")
    assert r.status_code == 429
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Rate limit exceeded"
    assert body["errors"]["limit"] == 2
    assert body["errors"]["window_seconds"] == rate_limiter.period_seconds
    assert r.headers["X-RateLimit-Limit"] == "2"
    assert r.headers["X-RateLimit-Remaining"] == "0"
    assert int(r.headers["Retry-After"]) >= 1


async def test_unknown_route_uses_error_envelope(client):
    r = await client.get("/api/v1/does-not-exist")
    assert r.status_code == 404
    body = r.json()
    assert body["success"] is False
    assert body["metadata"]["path"] == "/api/v1/does-not-exist"
    assert body["metadata"]["method"] == "GET"


async def test_validation_error_is_400_with_field_map(client):
    r = await client.post("/api/v1/brands/", json={"name": "", "sort_order": 10000})
    assert r.status_code == 400
    body = r.json()
    assert body["message"] == "Validation failed"
    assert "name" in body["errors"]
    assert "sort_order" in body["errors"]


async def test_negative_sort_order_rejected(client):
    r = await client.post("/api/v1/brands/", json={"name": "Nova", "sort_order": -1})
    assert r.status_code == 400
    assert "sort_order" in r.json()["errors"]

    r = await client.post("/api/v1/categories/", json={"name": "Garden", "sort_order": -1})
    assert r.status_code == 400
    assert "sort_order" in r.json()["errors"]


# ===================== BRANDS =====================


async def test_create_brand(client):
    r = await client.post("/api/v1/brands/", json={"name": "Acme Tools", "name_ar": "أكمي"})
    assert r.status_code == 201
    body = r.json()
    assert body["status_code"] == 201
    data = body["data"]
    assert data["slug"] == "acme-tools"
    assert data["display_id"].startswith("BRD-")
    assert data["is_active"] is True
    assert data["sort_order"] == 0


async def test_create_brand_blank_name_rejected(client):
    r = await client.post("/api/v1/brands/", json={"name": "   "})
    assert r.status_code == 400


async def test_create_brand_name_too_long_rejected(client):
    r = await client.post("/api/v1/brands/", json={"name": "x" * 256})
    assert r.status_code == 400


async def test_create_brand_duplicate_name_conflict(client, brand):
    r = await client.post("/api/v1/brands/", json={"name": "acme tools"})
    assert r.status_code == 409
    assert r.json()["success"] is False


async def test_brand_slug_collision_gets_suffix(client):
    r1 = await client.post("/api/v1/brands/", json={"name": "Nova"})
    r2 = await client.post("/api/v1/brands/", json={"name": "Nova!"})
    r3 = await client.post("/api/v1/brands/", json={"name": "Nova?"})
    assert r1.json()["data"]["slug"] == "nova"
    assert r2.json()["data"]["slug"] == "nova-2"
    assert r3.json()["data"]["slug"] == "nova-3"


async def test_brand_arabic_name_is_transliterated(client):
    r = await client.post("/api/v1/brands/", json={"name": "ساعة"})
    assert r.status_code == 201
    assert r.json()["data"]["slug"] == "saah"


async def test_get_brand_lookups(client, brand):
    r = await client.get(f"/api/v1/brands/{brand['id']}")
    assert r.status_code == 200
    assert r.json()["data"]["product_count"] == 0

    r = await client.get(f"/api/v1/brands/display/{brand['display_id']}")
    assert r.json()["data"]["id"] == brand["id"]

    r = await client.get(f"/api/v1/brands/slug/{brand['slug']}")
    assert r.json()["data"]["id"] == brand["id"]


async def test_get_brand_not_found(client):
    r = await client.get("/api/v1/brands/9999")
    assert r.status_code == 404
    assert r.json()["message"] == "Brand not found with id: 9999"


async def test_list_brands_paginated_by_name(client):
    for name in ["Zeta", "Alpha", "Mid"]:
        await client.post("/api/v1/brands/", json={"name": name})

    r = await client.get("/api/v1/brands/", params={"size": 2})
    data = r.json()["data"]
    assert [b["name"] for b in data["content"]] == ["Alpha", "Mid"]
    info = data["page_info"]
    assert info["total_elements"] == 3
    assert info["total_pages"] == 2
    assert info["has_next"] is True
    assert info["is_first"] is True

    r = await client.get("/api/v1/brands/", params={"size": 2, "page": 1})
    info = r.json()["data"]["page_info"]
    assert info["is_last"] is True
    assert info["has_previous"] is True


async def test_list_brands_invalid_sort_field(client):
    r = await client.get("/api/v1/brands/", params={"sort_by": "bogus"})
    assert r.status_code == 400


async def test_search_and_active_brands(client, brand):
    await client.post("/api/v1/brands/", json={"name": "Other", "is_active": False})

    r = await client.get("/api/v1/brands/search", params={"query": "ACME"})
    assert r.json()["data"]["page_info"]["total_elements"] == 1

    r = await client.get("/api/v1/brands/active")
    assert [b["name"] for b in r.json()["data"]] == ["Acme Tools"]


async def test_search_escapes_like_wildcards(client, brand, category):
    r = await client.get("/api/v1/brands/search", params={"query": "%"})
    assert r.json()["data"]["page_info"]["total_elements"] == 0
    r = await client.get("/api/v1/categories/search", params={"query": "_"})
    assert r.json()["data"]["page_info"]["total_elements"] == 0

    await client.post("/api/v1/brands/", json={"name": "100% Cotton"})
    r = await client.get("/api/v1/brands/search", params={"query": "0%"})
    assert [b["name"] for b in r.json()["data"]["content"]] == ["100% Cotton"]


async def test_update_brand_regenerates_slug(client, brand):
    r = await client.put(f"/api/v1/brands/{brand['id']}", json={"name": "Acme Pro", "sort_order": 3})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["slug"] == "acme-pro"
    assert data["sort_order"] == 3
    assert data["description"] == "Hand tools"


async def test_update_brand_duplicate_name_conflict(client, brand):
    await client.post("/api/v1/brands/", json={"name": "Other"})
    r = await client.put(f"/api/v1/brands/{brand['id']}", json={"name": "OTHER"})
    assert r.status_code == 409


async def test_activate_deactivate_brand(client, brand):
    r = await client.patch(f"/api/v1/brands/{brand['id']}/deactivate")
    assert r.json()["data"]["is_active"] is False
    r = await client.patch(f"/api/v1/brands/{brand['id']}/activate")
    assert r.json()["data"]["is_active"] is True


async def test_delete_brand(client, brand):
    r = await client.delete(f"/api/v1/brands/{brand['id']}")
    assert r.status_code == 200
    r = await client.get(f"/api/v1/brands/{brand['id']}")
    assert r.status_code == 404


async def test_delete_brand_with_products_conflict(client, product, brand):
    r = await client.delete(f"/api/v1/brands/{brand['id']}")
    assert r.status_code == 409

    r = await client.get(f"/api/v1/brands/{brand['id']}")
    assert r.json()["data"]["product_count"] == 1


# ===================== CATEGORIES =====================


async def _create_category(client, name, parent_id=None, sort_order=0):
    r = await client.post(
        "/api/v1/categories/",
        json={"name": name, "parent_id": parent_id, "sort_order": sort_order},
    )
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def test_create_category(client, category):
    assert category["slug"] == "electronics"
    assert category["display_id"].startswith("CAT-")
    assert category["parent_id"] is None


async def test_create_category_unknown_parent(client):
    r = await client.post("/api/v1/categories/", json={"name": "Orphan", "parent_id": 999})
    assert r.status_code == 404


async def test_create_category_duplicate_name(client, category):
    r = await client.post("/api/v1/categories/", json={"name": "ELECTRONICS"})
    assert r.status_code == 409


async def test_parents_and_children(client):
    root_b = await _create_category(client, "Home", sort_order=2)
    root_a = await _create_category(client, "Garden", sort_order=1)
    child = await _create_category(client, "Tools", parent_id=root_a["id"])

    r = await client.get("/api/v1/categories/parents")
    assert [c["id"] for c in r.json()["data"]] == [root_a["id"], root_b["id"]]

    r = await client.get(f"/api/v1/categories/{root_a['id']}/children")
    assert [c["id"] for c in r.json()["data"]] == [child["id"]]


async def test_category_tree(client):
    phones = await _create_category(client, "Phones", sort_order=1)
    smart = await _create_category(client, "Smartphones", parent_id=phones["id"])
    await _create_category(client, "Android", parent_id=smart["id"])
    await _create_category(client, "Laptops", sort_order=2)

    r = await client.get("/api/v1/categories/tree")
    assert r.status_code == 200
    tree = r.json()["data"]
    assert tree["total_categories"] == 4
    assert tree["parent_categories"] == 2
    assert tree["child_categories"] == 2
    assert tree["active_categories"] == 4
    assert tree["total_categories"] == tree["parent_categories"] + tree["child_categories"]

    roots = tree["categories"]
    assert [c["name"] for c in roots] == ["Phones", "Laptops"]
    assert roots[0]["children"][0]["name"] == "Smartphones"
    assert roots[0]["children"][0]["children"][0]["name"] == "Android"


async def test_category_cannot_be_own_parent(client, category):
    r = await client.put(f"/api/v1/categories/{category['id']}", json={"parent_id": category["id"]})
    assert r.status_code == 400


async def test_category_cannot_move_under_descendant(client):
    top = await _create_category(client, "Top")
    middle = await _create_category(client, "Middle", parent_id=top["id"])
    bottom = await _create_category(client, "Bottom", parent_id=middle["id"])

    r = await client.put(f"/api/v1/categories/{top['id']}", json={"parent_id": bottom["id"]})
    assert r.status_code == 400


async def test_category_update_unknown_parent(client, category):
    r = await client.put(f"/api/v1/categories/{category['id']}", json={"parent_id": 999})
    assert r.status_code == 404


async def test_category_update_renames_and_reparents(client, category):
    other = await _create_category(client, "Gadgets")
    r = await client.put(
        f"/api/v1/categories/{other['id']}",
        json={"name": "Smart Gadgets", "parent_id": category["id"]},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["slug"] == "smart-gadgets"
    assert data["parent_id"] == category["id"]


async def test_deactivate_category_with_active_children_rejected(client, category):
    await _create_category(client, "Audio", parent_id=category["id"])
    r = await client.patch(f"/api/v1/categories/{category['id']}/deactivate")
    assert r.status_code == 400


async def test_update_category_deactivation_with_active_children_rejected(client, category):
    await _create_category(client, "Audio", parent_id=category["id"])
    r = await client.put(f"/api/v1/categories/{category['id']}", json={"is_active": False})
    assert r.status_code == 400

    r = await client.get(f"/api/v1/categories/{category['id']}")
    assert r.json()["data"]["is_active"] is True
    r = await client.get("/api/v1/categories/tree")
    assert r.json()["data"]["total_categories"] == 2


async def test_delete_category_with_active_children_conflict(client, category):
    await _create_category(client, "Audio", parent_id=category["id"])
    r = await client.delete(f"/api/v1/categories/{category['id']}")
    assert r.status_code == 409


async def test_delete_category(client, category):
    r = await client.delete(f"/api/v1/categories/{category['id']}")
    assert r.status_code == 200
    r = await client.get(f"/api/v1/categories/{category['id']}")
    assert r.status_code == 404


async def test_category_lookups_and_search(client, category):
    r = await client.get(f"/api/v1/categories/slug/{category['slug']}")
    assert r.json()["data"]["id"] == category["id"]
    assert r.json()["data"]["product_count"] == 0

    r = await client.get(f"/api/v1/categories/display/{category['display_id']}")
    assert r.json()["data"]["id"] == category["id"]

    r = await client.get("/api/v1/categories/search", params={"query": "electro"})
    assert r.json()["data"]["page_info"]["total_elements"] == 1

    r = await client.get("/api/v1/categories/")
    assert r.json()["data"]["page_info"]["total_elements"] == 1
