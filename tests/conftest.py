"""Shared fixtures: in-memory database, API client and object factories"""

from decimal import Decimal

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from backshop.core import database
from backshop.core.database import get_db
from backshop.main import app
from backshop.models import Base, Integration, IntegrationStatus, IntegrationType
from backshop.schemas.order import CustomerInfo, DeliveryAddress, OrderCreate, OrderItemCreate
from backshop.services.notification_dispatcher import NotificationDispatcher
from backshop.services.product_service import ProductService
from backshop.services.telegram_service import TelegramService


@pytest.fixture()
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture()
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture()
async def client(session_factory, monkeypatch):
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    # Background notification tasks open their own sessions
    monkeypatch.setattr(database, "AsyncSessionLocal", session_factory)
    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture()
def make_product(db):
    async def _make(name="Test Product", price="100.00", images=None, **kwargs):
        data = {
            "name": name,
            "price_current": Decimal(price),
            "images": images or [],
        }
        data.update(kwargs)
        return await ProductService(db).create(data)

    return _make


@pytest.fixture()
def make_integration(db):
    async def _make(**kwargs):
        data = {
            "type": IntegrationType.TELEGRAM,
            "name": "Shop bot",
            "bot_token": "123:abc",
            "chat_id": "-100200",
            "status": IntegrationStatus.ACTIVE,
            "is_active": True,
        }
        data.update(kwargs)
        integration = Integration(**data)
        db.add(integration)
        await db.commit()
        return integration

    return _make


@pytest.fixture()
def order_data():
    def _make(*items, discount="0", delivery_cost="0", **kwargs):
        data = {
            "items": [
                OrderItemCreate(product_id=product_id, quantity=quantity)
                for product_id, quantity in items
            ],
            "customer": CustomerInfo(
                first_name="Anna",
                last_name="Nowak",
                email="anna@example.com",
                phone="+48 600 000 000",
            ),
            "delivery_address": DeliveryAddress(
                country="Poland",
                city="Kraków",
                street="Floriańska",
                building="12",
            ),
            "payment_method": "cash",
            "delivery_method": "courier",
            "discount": Decimal(discount),
            "delivery_cost": Decimal(delivery_cost),
        }
        data.update(kwargs)
        return OrderCreate(**data)

    return _make


class FakeTelegram:
    """Records Bot API calls and answers with a configurable outcome"""

    def __init__(self):
        self.requests = []
        self.should_succeed = True
        self.body = None

    def configure(self, should_succeed=True, body=None):
        self.should_succeed = should_succeed
        self.body = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(200, json=self.body)
        if self.should_succeed:
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 42}})
        return httpx.Response(500, json={"ok": False, "description": "Internal Server Error"})


@pytest.fixture()
def fake_telegram():
    return FakeTelegram()


@pytest.fixture()
def dispatcher(db, fake_telegram):
    transport = httpx.MockTransport(fake_telegram.handler)
    return NotificationDispatcher(db, telegram_service=TelegramService(transport=transport))
