"""HTTP: /order endpoints."""

from decimal import Decimal


def _create(client, headers, products, shipping_id="123", coupon_id=None):
    body = {
        "products": [{"product_id": pid, "quantity": qty} for pid, qty in products],
        "shipping_id": shipping_id,
    }
    if coupon_id is not None:
        body["coupon_id"] = coupon_id
    return client.post("/order", json=body, headers=headers)


def test_orders_require_token(client):
    assert client.get("/order").status_code == 401
    assert client.get("/order/whatever").status_code == 401


def test_create_and_get(client, auth_headers):
    resp = _create(client, auth_headers, [("A", 5)], shipping_id="123", coupon_id="123")

    assert resp.status_code == 201
    assert resp.json()["message"] == "Order created"
    order_id = resp.json()["order_id"]

    order = client.get(f"/order/{order_id}", headers=auth_headers).json()
    assert order["id"] == order_id
    assert [(p["product_id"], p["quantity"]) for p in order["products"]] == [("A", 5)]
    assert order["shipping_method"] == "超商"
    assert Decimal(order["shipping_fee"]) == 60
    assert order["coupon"]["code"] == "折扣20"
    assert Decimal(order["coupon"]["discount"]) == 20
    assert Decimal(order["total_amount"]) == Decimal("540")
    assert order["review"] is None


def test_unknown_coupon_is_ignored(client, auth_headers):
    order_id = _create(client, auth_headers, [("B", 2)], shipping_id="456", coupon_id="000").json()["order_id"]

    order = client.get(f"/order/{order_id}", headers=auth_headers).json()
    assert order["coupon"] is None
    assert Decimal(order["total_amount"]) == Decimal("199.00")


def test_unknown_shipping(client, auth_headers):
    resp = _create(client, auth_headers, [("A", 1)], shipping_id="999")

    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid shippingId: 999"}
    assert client.get("/order", headers=auth_headers).json() == []


def test_unknown_product(client, auth_headers):
    resp = _create(client, auth_headers, [("A", 1), ("Z", 1)])

    assert resp.status_code == 400
    assert client.get("/order", headers=auth_headers).json() == []


def test_list_keeps_creation_order(client, auth_headers):
    first = _create(client, auth_headers, [("A", 1)]).json()["order_id"]
    second = _create(client, auth_headers, [("B", 1)]).json()["order_id"]

    orders = client.get("/order", headers=auth_headers).json()

    assert [o["id"] for o in orders] == [first, second]


def test_update(client, auth_headers):
    order_id = _create(client, auth_headers, [("A", 1)]).json()["order_id"]

    resp = client.put(
        f"/order/{order_id}",
        json={
            "products": [{"product_id": "B", "quantity": 3}],
            "shipping_method": "宅配",
            "shipping_fee": 100,
            "coupon": {"code": "折扣20", "discount": 20},
        },
        headers=auth_headers,
    )

    assert resp.status_code == 200
    assert resp.json() == {"message": "Order updated"}
    order = client.get(f"/order/{order_id}", headers=auth_headers).json()
    assert [(p["product_id"], p["quantity"]) for p in order["products"]] == [("B", 3)]
    assert order["shipping_method"] == "宅配"
    assert Decimal(order["total_amount"]) == Decimal("228.50")


def test_update_missing_order(client, auth_headers):
    resp = client.put(
        "/order/missing",
        json={
            "products": [{"product_id": "A", "quantity": 1}],
            "shipping_method": "自取",
            "shipping_fee": 0,
        },
        headers=auth_headers,
    )

    assert resp.status_code == 404


def test_delete(client, auth_headers):
    order_id = _create(client, auth_headers, [("A", 1)]).json()["order_id"]

    resp = client.delete(f"/order/{order_id}", headers=auth_headers)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Order deleted"}
    assert client.get(f"/order/{order_id}", headers=auth_headers).status_code == 404
    assert client.delete(f"/order/{order_id}", headers=auth_headers).status_code == 404


def test_orders_are_per_user(client, auth_headers, other_headers):
    order_id = _create(client, auth_headers, [("A", 1)]).json()["order_id"]

    assert client.get(f"/order/{order_id}", headers=other_headers).status_code == 404
    assert client.delete(f"/order/{order_id}", headers=other_headers).status_code == 404
    assert client.get("/order", headers=other_headers).json() == []


def test_me_includes_orders(client, auth_headers):
    order_id = _create(client, auth_headers, [("C", 1)], shipping_id="789").json()["order_id"]

    me = client.get("/me", headers=auth_headers).json()

    assert [o["id"] for o in me["orders"]] == [order_id]
    assert me["orders"][0]["products"][0]["image_url"] is None
