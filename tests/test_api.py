from decimal import Decimal

import httpx
import pytest

from backshop.services import notification_dispatcher
from backshop.services.telegram_service import TelegramService

SESSION = {"X-Session-Id": "sess-1"}

CHECKOUT = {
    "customer": {
        "first_name": "Anna",
        "last_name": "Nowak",
        "email": "anna@example.com",
        "phone": "+48 600 000 000",
    },
    "delivery_address": {
        "country": "Poland",
        "city": "Kraków",
        "street": "Floriańska",
        "building": "12",
    },
    "payment_method": "card",
    "delivery_method": "courier",
    "discount": "20",
    "delivery_cost": "15",
}


@pytest.fixture()
async def product(client):
    response = await client.post(
        "/api/v1/products/",
        json={"name": "Running Shoes", "price_current": "100.00", "images": [{"url": "https://cdn.example.com/s.jpg"}]},
    )
    assert response.status_code == 201
    return response.json()


async def test_health(client):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestMenuApi:
    async def test_create_and_tree(self, client):
        root = (await client.post("/api/v1/menu/", json={"name": "Catalog"})).json()
        child = await client.post("/api/v1/menu/", json={"name": "Shoes", "parent_id": root["id"], "order": 1})
        await client.post("/api/v1/menu/", json={"name": "Hidden", "parent_id": root["id"], "is_active": False})

        assert root["slug"] == "catalog"
        assert child.status_code == 201

        tree = (await client.get("/api/v1/menu/tree")).json()
        assert [node["slug"] for node in tree] == ["catalog"]
        assert [node["slug"] for node in tree[0]["children"]] == ["shoes"]

        full = (await client.get("/api/v1/menu/tree", params={"include_inactive": True})).json()
        assert len(full[0]["children"]) == 2

    async def test_delete_with_children_is_rejected(self, client):
        root = (await client.post("/api/v1/menu/", json={"name": "Catalog"})).json()
        await client.post("/api/v1/menu/", json={"name": "Shoes", "parent_id": root["id"]})

        response = await client.delete(f"/api/v1/menu/{root['id']}")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "HAS_CHILDREN"

    async def test_self_parent(self, client):
        menu = (await client.post("/api/v1/menu/", json={"name": "Catalog"})).json()

        response = await client.patch(f"/api/v1/menu/{menu['id']}", json={"parent_id": menu["id"]})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SELF_PARENT"

    async def test_lookup_errors(self, client):
        assert (await client.get("/api/v1/menu/slug/nothing")).status_code == 404

        response = await client.get("/api/v1/menu/not-a-uuid")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_ID"


class TestCartApi:
    async def test_missing_key_header(self, client):
        response = await client.get("/api/v1/cart/")

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "INVALID_KEY"
        assert body["error"]["message"]

    async def test_cart_flow(self, client, product):
        empty = (await client.get("/api/v1/cart/", headers=SESSION)).json()
        assert empty["items"] == []
        assert Decimal(empty["subtotal"]) == 0

        await client.post("/api/v1/cart/items", headers=SESSION, json={"product_id": product["id"], "quantity": 1})
        cart = (
            await client.post("/api/v1/cart/items", headers=SESSION, json={"product_id": product["id"], "quantity": 2})
        ).json()

        assert cart["id"] == empty["id"]
        assert len(cart["items"]) == 1
        assert cart["item_count"] == 3
        assert Decimal(cart["subtotal"]) == Decimal("300")
        assert cart["items"][0]["product"]["slug"] == "running-shoes"

        item_id = cart["items"][0]["id"]
        cart = (await client.patch(f"/api/v1/cart/items/{item_id}", headers=SESSION, json={"quantity": 0})).json()
        assert cart["items"] == []

    async def test_unknown_product(self, client):
        response = await client.post(
            "/api/v1/cart/items",
            headers=SESSION,
            json={"product_id": "00000000-0000-0000-0000-000000000000"},
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    async def test_promo_code(self, client):
        cart = (await client.put("/api/v1/cart/promo-code", headers=SESSION, json={"promo_code": "AUTUMN"})).json()

        assert cart["promo_code"] == "AUTUMN"


class TestOrderApi:
    async def test_checkout(self, client, product):
        await client.post("/api/v1/cart/items", headers=SESSION, json={"product_id": product["id"], "quantity": 2})

        response = await client.post("/api/v1/orders/checkout", headers=SESSION, json=CHECKOUT)

        assert response.status_code == 201
        order = response.json()
        assert order["status"] == "pending"
        assert Decimal(order["subtotal"]) == Decimal("200")
        assert Decimal(order["total"]) == Decimal("195")
        assert order["items"][0]["product_name"] == "Running Shoes"

        cart = (await client.get("/api/v1/cart/", headers=SESSION)).json()
        assert cart["items"] == []

        by_number = await client.get(f"/api/v1/orders/number/{order['order_number']}")
        assert by_number.json()["id"] == order["id"]

    async def test_empty_cart_checkout(self, client):
        response = await client.post("/api/v1/orders/checkout", headers=SESSION, json=CHECKOUT)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "EMPTY_CART"

    async def test_unknown_products_are_listed(self, client, product):
        missing = "00000000-0000-0000-0000-000000000001"
        payload = dict(CHECKOUT, items=[
            {"product_id": product["id"], "quantity": 1},
            {"product_id": missing, "quantity": 1},
        ])

        response = await client.post("/api/v1/orders/", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["error"]["code"] == "PRODUCTS_NOT_FOUND"
        assert missing in body["error"]["message"]
        assert (await client.get("/api/v1/orders/")).json() == []

    async def test_order_without_items_is_invalid(self, client):
        response = await client.post("/api/v1/orders/", json=dict(CHECKOUT, items=[]))

        assert response.status_code == 422

    async def test_status_update_and_statistics(self, client, product):
        payload = dict(CHECKOUT, items=[{"product_id": product["id"], "quantity": 1}])
        order = (await client.post("/api/v1/orders/", json=payload)).json()

        updated = await client.patch(f"/api/v1/orders/{order['id']}", json={"status": "shipped", "is_paid": True})
        assert updated.json()["status"] == "shipped"

        stats = (await client.get("/api/v1/orders/statistics")).json()
        assert stats["total"] == 1
        assert stats["by_status"] == {"shipped": 1}
        assert Decimal(stats["total_revenue"]) == Decimal("95")

    async def test_notification_is_sent_in_background(
        self, client, product, make_integration, fake_telegram, monkeypatch
    ):
        transport = httpx.MockTransport(fake_telegram.handler)
        monkeypatch.setattr(
            notification_dispatcher, "TelegramService", lambda: TelegramService(transport=transport)
        )
        await make_integration()
        payload = dict(CHECKOUT, items=[{"product_id": product["id"], "quantity": 1}])

        order = (await client.post("/api/v1/orders/", json=payload)).json()

        assert len(fake_telegram.requests) == 1
        stored = (await client.get(f"/api/v1/orders/{order['id']}")).json()
        assert stored["is_sent_to_notification"] is True


class TestIntegrationApi:
    async def test_crud_and_statistics(self, client):
        created = await client.post(
            "/api/v1/integrations/",
            json={"type": "telegram", "name": "Shop bot", "bot_token": "123:abc", "chat_id": "-1"},
        )
        assert created.status_code == 201
        integration = created.json()
        assert "bot_token" not in integration
        assert integration["is_active"] is True
        assert integration["status"] == "inactive"

        activated = (await client.post(f"/api/v1/integrations/{integration['id']}/activate")).json()
        assert activated["is_active"] is True
        assert activated["status"] == "active"

        by_type = (await client.get("/api/v1/integrations/type/telegram")).json()
        assert [i["id"] for i in by_type] == [integration["id"]]

        stats = (await client.get("/api/v1/integrations/statistics")).json()
        assert stats == {"total": 1, "active": 1, "inactive": 0, "by_type": {"telegram": 1}}
