"""
SQLAlchemy async repositories.

Each repository wraps one AsyncSession (one per request) and commits after
every write; every operation is a single-row statement so the datastore's
own atomicity and uniqueness constraints are the only coordination needed.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ConstraintViolation, NotFound, Unavailable
from ..domain import Customer, Product, Shop, same_identity
from ..models import CustomerRow, ProductRow, ShopRow
from .base import CustomerRepository, ProductRepository, ShopOwnershipChecker, ShopRepository

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _classified(session: AsyncSession, action: str, conflict_message: str = "") -> AsyncIterator[None]:
    """Translate SQLAlchemy failures into classified service errors."""
    try:
        yield
    except IntegrityError as e:
        await session.rollback()
        logger.warning(f"{action} violated a constraint: {e.orig}")
        raise ConstraintViolation(conflict_message or f"{action} conflicts with existing data") from e
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Database error during {action}: {e}", exc_info=True)
        raise Unavailable(f"database error during {action}") from e


class SqlCustomerRepository(CustomerRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, customer: Customer) -> Customer:
        async with _classified(self.session, "customer create", "phone number already registered"):
            self.session.add(CustomerRow.from_entity(customer))
            await self.session.commit()
        return customer

    async def get_by_id(self, customer_id: uuid.UUID) -> Optional[Customer]:
        async with _classified(self.session, "customer lookup"):
            row = await self.session.get(CustomerRow, customer_id, populate_existing=True)
        return row.to_entity() if row else None

    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        async with _classified(self.session, "customer lookup"):
            result = await self.session.execute(
                select(CustomerRow)
                .where(CustomerRow.phone == phone)
                .execution_options(populate_existing=True)
            )
            row = result.scalar_one_or_none()
        return row.to_entity() if row else None

    async def update(self, customer: Customer) -> Customer:
        async with _classified(self.session, "customer update", "phone number already registered"):
            result = await self.session.execute(
                update(CustomerRow)
                .where(CustomerRow.id == customer.id)
                .values(
                    name=customer.name,
                    phone=customer.phone,
                    role=customer.role,
                    total_spent=customer.total_spent,
                    cashback_balance=customer.cashback_balance,
                    is_active=customer.is_active,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFound("customer not found")
            await self.session.commit()
        return customer


class SqlShopRepository(ShopRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, shop: Shop) -> Shop:
        async with _classified(self.session, "shop create"):
            self.session.add(ShopRow.from_entity(shop))
            await self.session.commit()
        return shop

    async def get_by_id(self, shop_id: uuid.UUID) -> Optional[Shop]:
        async with _classified(self.session, "shop lookup"):
            row = await self.session.get(ShopRow, shop_id, populate_existing=True)
        return row.to_entity() if row else None

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Shop]:
        async with _classified(self.session, "shop listing"):
            result = await self.session.execute(
                select(ShopRow)
                .where(ShopRow.owner_id == owner_id)
                .order_by(ShopRow.created_at.desc())
                .execution_options(populate_existing=True)
            )
            rows = result.scalars().all()
        return [row.to_entity() for row in rows]

    async def update(self, shop: Shop) -> Shop:
        async with _classified(self.session, "shop update"):
            result = await self.session.execute(
                update(ShopRow)
                .where(ShopRow.id == shop.id, ShopRow.version == shop.version)
                .values(
                    name=shop.name,
                    address=shop.address,
                    is_active=shop.is_active,
                    updated_at=shop.updated_at,
                    version=shop.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                await self._raise_missing_or_stale(shop.id)
            await self.session.commit()
        shop.version += 1
        return shop

    async def delete(self, shop_id: uuid.UUID) -> None:
        async with _classified(self.session, "shop delete"):
            result = await self.session.execute(delete(ShopRow).where(ShopRow.id == shop_id))
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFound("shop not found")
            await self.session.commit()

    async def _raise_missing_or_stale(self, shop_id: uuid.UUID) -> None:
        exists = await self.session.scalar(select(ShopRow.id).where(ShopRow.id == shop_id))
        if exists is None:
            raise NotFound("shop not found")
        raise ConstraintViolation("shop was modified concurrently, reload and retry")


class SqlProductRepository(ProductRepository):
    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, product: Product) -> Product:
        async with _classified(self.session, "product create", "product with this SKU already exists in this shop"):
            self.session.add(ProductRow.from_entity(product))
            await self.session.commit()
        return product

    async def get_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        async with _classified(self.session, "product lookup"):
            row = await self.session.get(ProductRow, product_id, populate_existing=True)
        return row.to_entity() if row else None

    async def list_by_shop(self, shop_id: uuid.UUID) -> list[Product]:
        async with _classified(self.session, "product listing"):
            result = await self.session.execute(
                select(ProductRow)
                .where(ProductRow.shop_id == shop_id)
                .order_by(ProductRow.created_at)
                .execution_options(populate_existing=True)
            )
            rows = result.scalars().all()
        return [row.to_entity() for row in rows]

    async def update(self, product: Product) -> Product:
        async with _classified(self.session, "product update", "product with this SKU already exists in this shop"):
            result = await self.session.execute(
                update(ProductRow)
                .where(
                    ProductRow.id == product.id,
                    ProductRow.shop_id == product.shop_id,
                    ProductRow.version == product.version,
                )
                .values(
                    name=product.name,
                    description=product.description,
                    price=product.price,
                    sku=product.sku or None,
                    stock_quantity=product.stock_quantity,
                    is_active=product.is_active,
                    updated_at=product.updated_at,
                    version=product.version + 1,
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                await self.session.rollback()
                await self._raise_missing_or_stale(product.id)
            await self.session.commit()
        product.version += 1
        return product

    async def delete(self, product_id: uuid.UUID) -> None:
        async with _classified(self.session, "product delete"):
            result = await self.session.execute(delete(ProductRow).where(ProductRow.id == product_id))
            if result.rowcount == 0:
                await self.session.rollback()
                raise NotFound("product not found")
            await self.session.commit()

    async def _raise_missing_or_stale(self, product_id: uuid.UUID) -> None:
        exists = await self.session.scalar(select(ProductRow.id).where(ProductRow.id == product_id))
        if exists is None:
            raise NotFound("product not found")
        raise ConstraintViolation("product was modified concurrently, reload and retry")


class SqlShopOwnershipChecker(ShopOwnershipChecker):
    """Reads shops.owner_id directly; shared by the product service."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_owner(self, subject_id: str, shop_id: uuid.UUID) -> bool:
        async with _classified(self.session, "shop ownership check"):
            owner_id = await self.session.scalar(select(ShopRow.owner_id).where(ShopRow.id == shop_id))
        if owner_id is None:
            # Shop not found, so the subject cannot be the owner
            return False
        return same_identity(owner_id, subject_id)
