import jwt
import pytest

from conftest import FACTORY_KEY, auth_header
from pizza_service.services.factory import MockFactoryService, get_factory_service


@pytest.fixture
def menu_item(client, admin_token):
    res = client.put(
        "/api/order/menu",
        json={"title": "Veggie", "description": "A garden of delight", "image": "pizza1.png", "price": 9.99},
        headers=auth_header(admin_token),
    )
    assert res.status_code == 200
    return res.json()[-1]


@pytest.fixture
def store(client, register, create_franchise):
    owner = register(name="owner")
    franchise = create_franchise(admin_emails=[owner["user"]["email"]])
    res = client.post(
        f"/api/franchise/{franchise['id']}/store",
        json={"name": "SLC"},
        headers=auth_header(owner["token"]),
    )
    assert res.status_code == 200
    return res.json()


def order_body(store, menu_item, price=9.99):
    return {
        "franchiseId": store["franchiseId"],
        "storeId": store["id"],
        "items": [{"menuId": menu_item["id"], "description": menu_item["title"], "price": price}],
    }


def test_menu_is_public(client):
    res = client.get("/api/order/menu")
    assert res.status_code == 200
    assert res.json() == []


def test_add_menu_item(client, admin_token, menu_item):
    assert menu_item["title"] == "Veggie"
    assert menu_item["price"] == 9.99

    res = client.put(
        "/api/order/menu",
        json={"title": "Pepperoni", "description": "Spicy treat", "image": "pizza2.png", "price": 0.0042},
        headers=auth_header(admin_token),
    )
    assert [item["title"] for item in res.json()] == ["Veggie", "Pepperoni"]
    assert client.get("/api/order/menu").json() == res.json()


def test_add_menu_item_requires_admin(client, register):
    diner = register()
    res = client.put(
        "/api/order/menu",
        json={"title": "Veggie", "description": "A garden", "image": "pizza1.png", "price": 1},
        headers=auth_header(diner["token"]),
    )
    assert res.status_code == 403
    assert res.json() == {"message": "unable to add menu item"}


def test_add_menu_item_missing_fields(client, admin_token):
    res = client.put("/api/order/menu", json={"title": "Veggie"}, headers=auth_header(admin_token))
    assert res.status_code == 400


def test_order_scenario(client, register, admin_token, store, menu_item):
    diner = register(name="hungry")
    headers = auth_header(diner["token"])

    res = client.post("/api/order", json=order_body(store, menu_item), headers=headers)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["order"]["id"] > 0
    assert body["order"]["franchiseId"] == store["franchiseId"]
    assert body["order"]["storeId"] == store["id"]
    assert body["order"]["items"][0]["menuId"] == menu_item["id"]
    assert body["order"]["items"][0]["price"] == 9.99
    assert body["jwt"]
    assert "followLinkToEndChaos" not in body

    pizza = jwt.decode(body["jwt"], FACTORY_KEY, algorithms=["HS256"])
    assert pizza["diner"] == {"id": diner["user"]["id"], "name": "hungry", "email": diner["user"]["email"]}
    assert pizza["order"]["id"] == body["order"]["id"]

    res = client.get("/api/order", headers=headers)
    assert res.status_code == 200
    history = res.json()
    assert history["dinerId"] == diner["user"]["id"]
    assert history["page"] == 1
    assert [order["id"] for order in history["orders"]] == [body["order"]["id"]]

    res = client.get("/api/franchise", headers=auth_header(admin_token))
    listed = res.json()["franchises"][0]["stores"][0]
    assert listed["totalRevenue"] == pytest.approx(9.99)


def test_order_history_pages(client, register, store, menu_item):
    diner = register()
    headers = auth_header(diner["token"])
    ids = [
        client.post("/api/order", json=order_body(store, menu_item), headers=headers).json()["order"]["id"]
        for _ in range(12)
    ]

    res = client.get("/api/order", headers=headers)
    assert [order["id"] for order in res.json()["orders"]] == list(reversed(ids))[:10]

    res = client.get("/api/order", params={"page": "2"}, headers=headers)
    assert res.json()["page"] == "2"
    assert [order["id"] for order in res.json()["orders"]] == list(reversed(ids))[10:]

    res = client.get("/api/order", params={"page": "abc"}, headers=headers)
    assert res.status_code == 400


def test_order_history_is_per_diner(client, register, store, menu_item):
    diner = register()
    other = register()
    client.post("/api/order", json=order_body(store, menu_item), headers=auth_header(diner["token"]))

    res = client.get("/api/order", headers=auth_header(other["token"]))
    assert res.json()["orders"] == []


def test_factory_failure_keeps_order(client, register, store, menu_item):
    client.app.dependency_overrides[get_factory_service] = lambda: MockFactoryService(
        FACTORY_KEY, failure_rate=1.0, max_latency=0
    )
    diner = register()
    headers = auth_header(diner["token"])

    res = client.post("/api/order", json=order_body(store, menu_item), headers=headers)
    assert res.status_code == 500
    body = res.json()
    assert body["message"] == "Failed to fulfill order at factory"
    assert body["followLinkToEndChaos"].startswith("mock://pizza-factory/report/")

    res = client.get("/api/order", headers=headers)
    assert len(res.json()["orders"]) == 1


def test_order_unknown_menu_item(client, register, store, menu_item):
    diner = register()
    body = order_body(store, menu_item)
    body["items"][0]["menuId"] = 9999

    res = client.post("/api/order", json=body, headers=auth_header(diner["token"]))
    assert res.status_code == 500
    assert res.json() == {"message": "unknown menu item 9999"}

    res = client.get("/api/order", headers=auth_header(diner["token"]))
    assert res.json()["orders"] == []


def test_order_validation(client, register, store, menu_item):
    diner = register()
    headers = auth_header(diner["token"])

    body = order_body(store, menu_item)
    body["items"] = []
    assert client.post("/api/order", json=body, headers=headers).status_code == 400

    body = order_body(store, menu_item, price=-1)
    assert client.post("/api/order", json=body, headers=headers).status_code == 400

    body = order_body(store, menu_item)
    body["storeId"] = 0
    assert client.post("/api/order", json=body, headers=headers).status_code == 400


def test_orders_require_auth(client, store, menu_item):
    assert client.get("/api/order").status_code == 401
    assert client.post("/api/order", json=order_body(store, menu_item)).status_code == 401
