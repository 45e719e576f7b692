import pytest

from conftest import API, auth_headers


@pytest.fixture
def shopkeeper(make_user):
    return make_user(role="shopkeeper", name="Ravi")


@pytest.fixture
def placed(client, make_user, make_address, make_shop, make_product, make_inventory, shopkeeper):
    """One order with two lines placed by a customer at the shopkeeper's shop."""
    shop = make_shop(owner=shopkeeper, name="Ravi Stores")
    oil = make_product(name="Oil")
    flour = make_product(name="Flour")
    make_inventory(shop, oil, stock=5, selling_price="150.00")
    make_inventory(shop, flour, stock=5, selling_price="40.00")

    customer = make_user(name="Meera", phone_number="9822222222")
    make_address(customer)
    for product in (oil, flour):
        client.post(
            f"{API}/cart/items",
            json={"product_id": product.product_id, "quantity": 1},
            headers=auth_headers(customer),
        )
    resp = client.post(
        f"{API}/orders", json={"shop_id": shop.shop_id}, headers=auth_headers(customer)
    )
    assert resp.status_code == 201
    return {"shop": shop, "customer": customer, "order_id": resp.json()["data"]["order_id"]}


def test_list_shop_orders(client, shopkeeper, placed):
    resp = client.get(f"{API}/shop-orders/{placed['shop'].shop_id}", headers=auth_headers(shopkeeper))

    assert resp.status_code == 200
    orders = resp.json()["data"]
    assert len(orders) == 1
    row = orders[0]
    assert row["order_id"] == placed["order_id"]
    assert row["customer"] == {"name": "Meera", "phone": "9822222222"}
    assert row["total_amount"] == 190.0
    assert row["item_count"] == 2

    detail = client.get(
        f"{API}/shop-orders/{placed['shop'].shop_id}/{placed['order_id']}",
        headers=auth_headers(shopkeeper),
    ).json()["data"]
    first_item = detail["items"][0]
    assert row["preview"] == {
        "name": first_item["product_name"],
        "qty": first_item["quantity"],
        "image": first_item["image_url"],
    }


def test_shop_order_detail(client, shopkeeper, placed):
    resp = client.get(
        f"{API}/shop-orders/{placed['shop'].shop_id}/{placed['order_id']}",
        headers=auth_headers(shopkeeper),
    )

    data = resp.json()["data"]
    assert data["order"]["customer"]["name"] == "Meera"
    assert sorted(i["product_name"] for i in data["items"]) == ["Flour", "Oil"]
    assert data["address"]["pincode"] == "411001"
    assert data["payment"]["payment_method"] == "COD"


def test_order_of_another_shop_is_not_found(client, shopkeeper, placed, make_shop):
    second = make_shop(owner=shopkeeper, name="Ravi Annex")

    detail = client.get(
        f"{API}/shop-orders/{second.shop_id}/{placed['order_id']}",
        headers=auth_headers(shopkeeper),
    )
    update = client.put(
        f"{API}/shop-orders/{second.shop_id}/{placed['order_id']}/status",
        json={"order_status": "CONFIRMED"},
        headers=auth_headers(shopkeeper),
    )

    assert detail.status_code == 404
    assert update.status_code == 404
    assert update.json()["message"] == "Order not found"


def test_shop_routes_require_shopkeeper_owner(client, make_user, placed):
    shop_id = placed["shop"].shop_id
    stranger = make_user(role="shopkeeper")

    as_customer = client.get(f"{API}/shop-orders/{shop_id}", headers=auth_headers(placed["customer"]))
    as_stranger = client.get(f"{API}/shop-orders/{shop_id}", headers=auth_headers(stranger))
    unknown = client.get(f"{API}/shop-orders/999999", headers=auth_headers(stranger))

    assert as_customer.status_code == 403
    assert as_customer.json()["message"] == "Access denied. Required roles: shopkeeper"
    assert as_stranger.status_code == 403
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Shop not found"


def test_update_status(client, shopkeeper, placed):
    url = f"{API}/shop-orders/{placed['shop'].shop_id}/{placed['order_id']}/status"

    resp = client.put(url, json={"order_status": "confirmed"}, headers=auth_headers(shopkeeper))

    assert resp.status_code == 200
    assert resp.json()["data"] == {"order_id": placed["order_id"], "order_status": "CONFIRMED"}
    seen_by_customer = client.get(
        f"{API}/orders/{placed['order_id']}", headers=auth_headers(placed["customer"])
    ).json()["data"]
    assert seen_by_customer["order_status"] == "CONFIRMED"


def test_update_status_rejects_unknown_value(client, shopkeeper, placed):
    url = f"{API}/shop-orders/{placed['shop'].shop_id}/{placed['order_id']}/status"

    bad = client.put(url, json={"order_status": "LOST"}, headers=auth_headers(shopkeeper))
    missing = client.put(url, json={}, headers=auth_headers(shopkeeper))

    assert bad.status_code == 400
    assert bad.json()["message"] == "Invalid order status"
    assert missing.status_code == 400
