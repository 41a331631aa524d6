"""
Payment endpoint tests: creation rules, lookups, transitions and their
effect on the order's payment status.
"""


async def _create_order(client):
    payload = {
        "customer_email": "buyer@example.com",
        "customer_name": "Ali Saleh",
        "shipping_address": {"city": "Sana'a"},
        "items": [{"product_id": 1, "product_name": "Kettle", "quantity": 2, "unit_price": 100}],
    }
    r = await client.post("/api/v1/orders/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def _create_payment(client, order_id, **overrides):
    payload = {"order_id": order_id, "payment_method": "cash_on_delivery"}
    payload.update(overrides)
    r = await client.post("/api/v1/payments/", json=payload)
    assert r.status_code == 201, r.text
    return r.json()["data"]


async def _order(client, order_id):
    return (await client.get(f"/api/v1/orders/{order_id}")).json()["data"]


# ===================== CREATE =====================


async def test_create_cash_payment_defaults_to_order_total(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"])

    assert payment["status"] == "pending"
    assert payment["amount"] == order["total_amount"]
    assert payment["currency"] == "YER"
    assert payment["display_id"].startswith("PAY-")
    assert payment["transaction_id"].startswith("TXN-")
    assert payment["payment_gateway"] is None
    assert payment["method_label_ar"] == "الدفع عند التسليم"


async def test_create_wallet_payment_is_processing(client):
    order = await _create_order(client)
    payment = await _create_payment(
        client, order["id"], payment_method="jeeb", wallet_phone="+967 771 234 567", amount=100
    )
    assert payment["status"] == "processing"
    assert payment["payment_gateway"] == "jeeb_gateway"
    assert payment["amount"] == 100.0


async def test_create_wallet_payment_requires_matching_phone(client):
    order = await _create_order(client)
    r = await client.post("/api/v1/payments/", json={"order_id": order["id"], "payment_method": "flousi"})
    assert r.status_code == 400

    r = await client.post(
        "/api/v1/payments/",
        json={"order_id": order["id"], "payment_method": "flousi", "wallet_phone": "771234567"},
    )
    assert r.status_code == 400
    assert r.json()["success"] is False


async def test_create_bank_transfer_keeps_reference(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"], payment_method="bank_transfer", bank_reference="BNK-77")
    assert payment["status"] == "pending"
    assert payment["gateway_transaction_id"] == "BNK-77"


async def test_create_payment_validation(client):
    order = await _create_order(client)
    r = await client.post("/api/v1/payments/", json={"order_id": order["id"], "payment_method": "cash_on_delivery", "amount": 0})
    assert r.status_code == 400
    r = await client.post("/api/v1/payments/", json={"order_id": order["id"], "payment_method": "cheque"})
    assert r.status_code == 400


async def test_create_payment_unknown_order(client):
    r = await client.post("/api/v1/payments/", json={"order_id": 999, "payment_method": "cash_on_delivery"})
    assert r.status_code == 404


async def test_create_payment_for_cancelled_or_paid_order_conflict(client):
    cancelled = await _create_order(client)
    await client.put(f"/api/v1/orders/{cancelled['id']}/cancel")
    r = await client.post("/api/v1/payments/", json={"order_id": cancelled["id"], "payment_method": "cash_on_delivery"})
    assert r.status_code == 409

    paid = await _create_order(client)
    payment = await _create_payment(client, paid["id"])
    await client.put(f"/api/v1/payments/{payment['id']}/confirm", json={})
    r = await client.post("/api/v1/payments/", json={"order_id": paid["id"], "payment_method": "cash_on_delivery"})
    assert r.status_code == 409


# ===================== READ =====================


async def test_payment_lookups(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"])

    for path in (
        f"/api/v1/payments/{payment['id']}",
        f"/api/v1/payments/display/{payment['display_id']}",
        f"/api/v1/payments/transaction/{payment['transaction_id']}",
    ):
        r = await client.get(path)
        assert r.status_code == 200, path
        assert r.json()["data"]["id"] == payment["id"]

    r = await client.get("/api/v1/payments/transaction/TXN-NOPE")
    assert r.status_code == 404
    r = await client.get("/api/v1/payments/999")
    assert r.status_code == 404


async def test_order_payments_and_filters(client):
    order = await _create_order(client)
    first = await _create_payment(client, order["id"], payment_method="jeeb", wallet_phone="771234567")
    await client.put(f"/api/v1/payments/{first['id']}/reject", json={"reason": "Insufficient balance"})
    second = await _create_payment(client, order["id"])

    r = await client.get(f"/api/v1/payments/order/{order['id']}")
    assert [p["id"] for p in r.json()["data"]] == [first["id"], second["id"]]

    r = await client.get("/api/v1/payments/order/999")
    assert r.status_code == 404

    r = await client.get("/api/v1/payments/status/failed")
    assert [p["id"] for p in r.json()["data"]["content"]] == [first["id"]]

    r = await client.get("/api/v1/payments/method/cash_on_delivery")
    assert [p["id"] for p in r.json()["data"]["content"]] == [second["id"]]

    r = await client.get("/api/v1/payments/status/bogus")
    assert r.status_code == 400

    r = await client.get("/api/v1/payments/")
    assert r.json()["data"]["page_info"]["total_elements"] == 2


async def test_payments_health(client):
    r = await client.get("/api/v1/payments/health")
    assert r.json() == {"status": "UP", "service": "payments"}


# ===================== TRANSITIONS =====================


async def test_confirm_payment_confirms_order(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"], payment_method="mobile_money", wallet_phone="781234567")

    r = await client.put(
        f"/api/v1/payments/{payment['id']}/confirm",
        json={"gateway_transaction_id": "GW-1", "gateway_response": {"code": "00"}},
    )
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "completed"
    assert data["gateway_transaction_id"] == "GW-1"
    assert data["gateway_response"] == {"code": "00"}
    assert data["processed_at"] is not None

    refreshed = await _order(client, order["id"])
    assert refreshed["payment_status"] == "paid"
    assert refreshed["status"] == "confirmed"

    r = await client.put(f"/api/v1/payments/{payment['id']}/confirm", json={})
    assert r.status_code == 409


async def test_reject_payment_marks_order_failed(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"])

    r = await client.put(f"/api/v1/payments/{payment['id']}/reject", json={"reason": "Customer refused"})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["status"] == "failed"
    assert data["failure_reason"] == "Customer refused"
    assert (await _order(client, order["id"]))["payment_status"] == "failed"

    r = await client.put(f"/api/v1/payments/{payment['id']}/reject", json={"reason": "again"})
    assert r.status_code == 409
    r = await client.put(f"/api/v1/payments/{payment['id']}/confirm", json={})
    assert r.status_code == 409

    r = await client.put(f"/api/v1/payments/{payment['id']}/reject", json={"reason": "  "})
    assert r.status_code == 400


async def test_refund_requires_completed_payment(client):
    order = await _create_order(client)
    payment = await _create_payment(client, order["id"])

    r = await client.put(f"/api/v1/payments/{payment['id']}/refund")
    assert r.status_code == 409
    assert r.json()["success"] is False

    await client.put(f"/api/v1/payments/{payment['id']}/confirm", json={})
    r = await client.put(f"/api/v1/payments/{payment['id']}/refund")
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "refunded"
    assert (await _order(client, order["id"]))["payment_status"] == "refunded"

    r = await client.put(f"/api/v1/payments/{payment['id']}/refund")
    assert r.status_code == 409


async def test_transition_on_unknown_payment(client):
    r = await client.put("/api/v1/payments/999/refund")
    assert r.status_code == 404


# ===================== STATISTICS =====================


async def test_payment_statistics(client):
    order = await _create_order(client)
    paid = await _create_payment(client, order["id"], amount=120)
    await client.put(f"/api/v1/payments/{paid['id']}/confirm", json={})

    other = await _create_order(client)
    failed = await _create_payment(client, other["id"], payment_method="flousi", wallet_phone="731234567")
    await client.put(f"/api/v1/payments/{failed['id']}/reject", json={"reason": "Timeout"})
    await _create_payment(client, other["id"], payment_method="bank_transfer")

    r = await client.get("/api/v1/payments/statistics")
    assert r.status_code == 200
    stats = r.json()["data"]
    assert stats["total_payments"] == 3
    assert stats["successful_payments"] == 1
    assert stats["failed_payments"] == 1
    assert stats["pending_payments"] == 1
    assert stats["refunded_payments"] == 0
    assert stats["total_amount"] == 120.0
    assert stats["today_amount"] == 120.0
    assert stats["method_statistics"] == {
        "jeeb": 0,
        "flousi": 1,
        "mobile_money": 0,
        "cash_on_delivery": 1,
        "bank_transfer": 1,
    }
