import re
import uuid
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from backshop.core.exceptions import (
    BadRequestException,
    ConflictException,
    NotFoundException,
    PartialProductMismatchException,
)
from backshop.models import Order, OrderStatus
from backshop.schemas.order import CheckoutRequest, OrderUpdate
from backshop.services.cart_service import CartService
from backshop.services.order_service import OrderService


@pytest.fixture()
def service(db, dispatcher):
    return OrderService(db, dispatcher=dispatcher)


async def _order_count(db):
    return (await db.execute(select(func.count()).select_from(Order))).scalar()


class TestCreateOrder:
    async def test_totals_from_current_prices(self, service, make_product, order_data):
        product = await make_product("Shoes", "100.00")

        order = await service.create_order(
            order_data((product.id, 2), discount="20", delivery_cost="15")
        )

        assert order.subtotal == Decimal("200")
        assert order.total == Decimal("195")
        assert order.status == OrderStatus.PENDING
        assert order.currency == "zł"
        assert order.is_sent_to_notification is False

    async def test_totals_add_up_for_every_line(self, service, make_product, order_data):
        a = await make_product("A", "19.99")
        b = await make_product("B", "0.50")

        order = await service.create_order(
            order_data((a.id, 3), (b.id, 7), discount="5", delivery_cost="12.30")
        )

        assert [item.total for item in order.items] == [Decimal("59.97"), Decimal("3.50")]
        assert order.subtotal == sum(item.total for item in order.items)
        assert order.total == order.subtotal - order.discount + order.delivery_cost

    async def test_items_snapshot_product(self, service, make_product, order_data):
        product = await make_product(
            "Leather Bag",
            "250.00",
            images=[{"url": "https://cdn.example.com/bag-1.jpg"}, {"url": "https://cdn.example.com/bag-2.jpg"}],
        )

        order = await service.create_order(order_data((product.id, 1)))
        product.price_current = Decimal("300.00")
        product.name = "Renamed"

        item = order.items[0]
        assert item.product_name == "Leather Bag"
        assert item.product_slug == "leather-bag"
        assert item.product_image == "https://cdn.example.com/bag-1.jpg"
        assert item.price == Decimal("250.00")
        assert item.discount == Decimal("0")

    async def test_order_number_format(self, service, make_product, order_data):
        product = await make_product()

        order = await service.create_order(order_data((product.id, 1)))

        assert re.fullmatch(r"ORD-\d{13}-\d{1,3}", order.order_number)

    async def test_missing_product_persists_nothing_and_keeps_cart(
        self, db, service, make_product, order_data
    ):
        p1 = await make_product("P1")
        carts = CartService(db)
        cart = await carts.get_or_create_cart(session_id="s1")
        await carts.add_item(cart, p1.id, 1)

        with pytest.raises(PartialProductMismatchException) as exc_info:
            await service.create_order(order_data((p1.id, 1), (uuid.uuid4(), 1)), session_id="s1")

        assert exc_info.value.status_code == 400
        assert await _order_count(db) == 0
        kept = await carts.get_or_create_cart(session_id="s1")
        assert kept.id == cart.id
        assert len(kept.items) == 1

    async def test_duplicate_product_ids_are_not_a_mismatch(self, service, make_product, order_data):
        product = await make_product()

        order = await service.create_order(order_data((product.id, 1), (product.id, 2)))

        assert [item.quantity for item in order.items] == [1, 2]

    async def test_session_cart_is_deleted(self, db, service, make_product, order_data):
        product = await make_product()
        carts = CartService(db)
        cart = await carts.get_or_create_cart(session_id="s1")
        await carts.add_item(cart, product.id, 1)

        await service.create_order(order_data((product.id, 1)), session_id="s1")

        assert await carts.delete_session_cart("s1") is False

    async def test_notification_failure_keeps_order_pending(
        self, db, service, make_product, make_integration, order_data, fake_telegram
    ):
        fake_telegram.configure(should_succeed=False)
        integration = await make_integration()
        product = await make_product()

        order = await service.create_order(order_data((product.id, 1)))

        assert order.status == OrderStatus.PENDING
        assert order.is_sent_to_notification is False
        assert len(fake_telegram.requests) == 1

        stored = await service.find_one(order.id)
        assert stored.is_sent_to_notification is False
        assert integration.last_error is not None

    async def test_notification_success_marks_order(
        self, service, make_product, make_integration, order_data, fake_telegram
    ):
        await make_integration()
        product = await make_product()

        order = await service.create_order(order_data((product.id, 1)))

        assert order.is_sent_to_notification is True
        assert order.sent_to_notification_at is not None

    async def test_dispatch_can_be_deferred(
        self, service, make_product, make_integration, order_data, fake_telegram
    ):
        await make_integration()
        product = await make_product()

        order = await service.create_order(order_data((product.id, 1)), dispatch_notification=False)

        assert fake_telegram.requests == []
        assert order.is_sent_to_notification is False


class TestOrderNumberCollisions:
    async def test_retries_taken_number(self, service, make_product, order_data, monkeypatch):
        product = await make_product()
        first = await service.create_order(order_data((product.id, 1)))
        numbers = iter([first.order_number, "ORD-1700000000000-7"])
        monkeypatch.setattr(service, "generate_order_number", lambda: next(numbers))

        second = await service.create_order(order_data((product.id, 1)))

        assert second.order_number == "ORD-1700000000000-7"

    async def test_retries_after_unique_constraint_violation(
        self, db, service, make_product, order_data, monkeypatch
    ):
        product = await make_product()
        first = await service.create_order(order_data((product.id, 1)))
        taken = first.order_number
        numbers = iter([taken, "ORD-1700000000000-8"])

        async def never_taken(order_number):
            return False

        monkeypatch.setattr(service, "_order_number_exists", never_taken)
        monkeypatch.setattr(service, "generate_order_number", lambda: next(numbers))

        second = await service.create_order(order_data((product.id, 2)))

        assert second.order_number == "ORD-1700000000000-8"
        assert [item.quantity for item in second.items] == [2]
        assert await _order_count(db) == 2

    async def test_gives_up_after_max_attempts(self, db, service, make_product, order_data, monkeypatch):
        product = await make_product()
        first = await service.create_order(order_data((product.id, 1)))
        monkeypatch.setattr(service, "generate_order_number", lambda: first.order_number)

        with pytest.raises(ConflictException):
            await service.create_order(order_data((product.id, 1)))

        assert await _order_count(db) == 1


class TestCheckoutCart:
    async def test_checkout_uses_cart_lines_and_promo(self, db, service, make_product, order_data):
        product = await make_product("Shoes", "100.00")
        carts = CartService(db)
        cart = await carts.get_or_create_cart(session_id="s1")
        await carts.add_item(cart, product.id, 2, variant="42")
        await carts.apply_promo_code(cart, "AUTUMN")
        checkout = CheckoutRequest(
            **order_data((product.id, 1), discount="20", delivery_cost="15").model_dump(exclude={"items"})
        )

        order = await service.checkout_cart(cart, checkout)

        assert order.items[0].quantity == 2
        assert order.items[0].variant == "42"
        assert order.total == Decimal("195")
        assert order.promo_code == "AUTUMN"
        assert await carts.delete_session_cart("s1") is False

    async def test_empty_cart_is_rejected(self, db, service, order_data):
        cart = await CartService(db).get_or_create_cart(session_id="s1")
        checkout = CheckoutRequest(
            **order_data((uuid.uuid4(), 1)).model_dump(exclude={"items"})
        )

        with pytest.raises(BadRequestException):
            await service.checkout_cart(cart, checkout)


class TestManageOrders:
    async def test_find_by_id_and_number(self, service, make_product, order_data):
        product = await make_product()
        order = await service.create_order(order_data((product.id, 1)))

        assert (await service.find_one(order.id)).id == order.id
        assert (await service.find_by_order_number(order.order_number)).id == order.id

    async def test_missing_and_malformed_ids(self, service):
        with pytest.raises(NotFoundException):
            await service.find_one(uuid.uuid4())
        with pytest.raises(BadRequestException):
            await service.find_one("nope")
        with pytest.raises(NotFoundException):
            await service.find_by_order_number("ORD-0-0")

    async def test_any_status_transition_is_allowed(self, service, make_product, order_data):
        product = await make_product()
        order = await service.create_order(order_data((product.id, 1)))

        await service.update(order.id, OrderUpdate(status=OrderStatus.DELIVERED))
        updated = await service.update(order.id, OrderUpdate(status=OrderStatus.PENDING, is_paid=True))

        assert updated.status == OrderStatus.PENDING
        assert updated.is_paid is True

    async def test_find_all_skips_cancelled(self, service, make_product, order_data):
        product = await make_product()
        kept = await service.create_order(order_data((product.id, 1)))
        cancelled = await service.create_order(order_data((product.id, 1)))
        await service.update(cancelled.id, OrderUpdate(status=OrderStatus.CANCELLED))

        assert [o.id for o in await service.find_all()] == [kept.id]
        assert len(await service.find_all(include_cancelled=True)) == 2

    async def test_remove(self, db, service, make_product, order_data):
        product = await make_product()
        order = await service.create_order(order_data((product.id, 1)))

        await service.remove(order.id)

        assert await _order_count(db) == 0
        with pytest.raises(NotFoundException):
            await service.remove(order.id)

    async def test_statistics(self, service, make_product, order_data):
        product = await make_product("Thing", "10.00")
        paid = await service.create_order(order_data((product.id, 3)))
        await service.create_order(order_data((product.id, 1)))
        await service.update(paid.id, OrderUpdate(is_paid=True, status=OrderStatus.CONFIRMED))

        stats = await service.get_statistics()

        assert stats["total"] == 2
        assert stats["by_status"] == {"confirmed": 1, "pending": 1}
        assert stats["total_revenue"] == Decimal("30")
        assert stats["average_order_value"] == Decimal("15.00")
