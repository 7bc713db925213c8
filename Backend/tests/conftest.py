"""
Pytest configuration and fixtures.

Service and API tests run against the in-memory repositories, wired into the
app through dependency_overrides. SQL repository tests get a throwaway SQLite
database (aiosqlite) with foreign keys enabled, so the real constraints and
cascades are exercised without a Postgres server.
"""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from miniature.core.db import Base
from miniature.customer_routes import get_customer_service
from miniature.domain import Customer, Shop, Product, utcnow
from miniature.main import create_app
from miniature.product_routes import get_product_service
from miniature.repositories import (
    InMemoryCustomerRepository,
    InMemoryProductRepository,
    InMemoryShopOwnershipChecker,
    InMemoryShopRepository,
)
from miniature.services import CustomerService, ProductService, ShopService
from miniature.shop_routes import get_shop_service
from miniature.token import get_token_issuer

import miniature.models  # noqa: F401  (registers tables on Base.metadata)


class Store:
    """One set of in-memory repositories shared by the services under test."""

    def __init__(self):
        self.customers = InMemoryCustomerRepository()
        self.shops = InMemoryShopRepository()
        self.products = InMemoryProductRepository()
        self.ownership = InMemoryShopOwnershipChecker(self.shops)

    def customer_service(self) -> CustomerService:
        return CustomerService(self.customers, get_token_issuer())

    def shop_service(self) -> ShopService:
        return ShopService(self.shops)

    def product_service(self) -> ProductService:
        return ProductService(self.products, self.ownership)

    async def add_customer(self, name="Alice", phone=None, role="SELLER", is_active=True) -> Customer:
        customer = Customer(
            id=uuid.uuid4(),
            phone=phone or f"0912{uuid.uuid4().int % 10_000_000:07d}",
            name=name,
            role=role,
            is_active=is_active,
        )
        return await self.customers.create(customer)

    async def add_shop(self, owner: Customer, name="Alice's Boutique") -> Shop:
        now = utcnow()
        shop = Shop(id=uuid.uuid4(), name=name, owner_id=owner.id, created_at=now, updated_at=now)
        return await self.shops.create(shop)

    async def add_product(self, shop: Shop, name="A", price=10.0, sku="", stock_quantity=1) -> Product:
        now = utcnow()
        product = Product(
            id=uuid.uuid4(),
            shop_id=shop.id,
            name=name,
            price=price,
            sku=sku,
            stock_quantity=stock_quantity,
            created_at=now,
            updated_at=now,
        )
        return await self.products.create(product)


@pytest.fixture
def store() -> Store:
    return Store()


@pytest.fixture
def auth_header():
    """Build the Authorization header for a customer, signed by the app's own issuer."""
    def _header(customer: Customer) -> dict[str, str]:
        token = get_token_issuer().issue(str(customer.id), customer.role)
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest.fixture
async def client(store: Store):
    """
    AsyncClient for a fresh app whose services use the in-memory store.
    """
    app = create_app()
    app.dependency_overrides[get_customer_service] = store.customer_service
    app.dependency_overrides[get_shop_service] = store.shop_service
    app.dependency_overrides[get_product_service] = store.product_service

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def sqlite_session():
    """
    Session on a fresh in-memory SQLite database with all tables created.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()
