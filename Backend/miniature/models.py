import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from .core.db import Base
from .domain import Customer, Product, Shop


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CustomerRow(Base):
    __tablename__ = "customers"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(32), nullable=False, default="OWNER")
    total_spent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    cashback_balance: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def to_entity(self) -> Customer:
        return Customer(
            id=self.id,
            phone=self.phone,
            name=self.name,
            role=self.role,
            total_spent=self.total_spent,
            cashback_balance=self.cashback_balance,
            is_active=self.is_active,
            created_at=_as_utc(self.created_at),
        )

    @classmethod
    def from_entity(cls, customer: Customer) -> "CustomerRow":
        return cls(
            id=customer.id,
            phone=customer.phone,
            name=customer.name,
            role=customer.role,
            total_spent=customer.total_spent,
            cashback_balance=customer.cashback_balance,
            is_active=customer.is_active,
            created_at=customer.created_at,
        )


class ShopRow(Base):
    __tablename__ = "shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    def to_entity(self) -> Shop:
        return Shop(
            id=self.id,
            name=self.name,
            owner_id=self.owner_id,
            address=self.address,
            is_active=self.is_active,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
            version=self.version,
        )

    @classmethod
    def from_entity(cls, shop: Shop) -> "ShopRow":
        return cls(
            id=shop.id,
            name=shop.name,
            owner_id=shop.owner_id,
            address=shop.address,
            is_active=shop.is_active,
            created_at=shop.created_at,
            updated_at=shop.updated_at,
            version=shop.version,
        )


class ProductRow(Base):
    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    shop_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("shops.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price: Mapped[float] = mapped_column(Float, nullable=False)
    # NULL when blank so the per-shop uniqueness only applies to real SKUs
    sku: Mapped[str | None] = mapped_column(String(64), nullable=True)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    __table_args__ = (
        UniqueConstraint("shop_id", "sku", name="uq_product_shop_sku"),
        CheckConstraint("price >= 0", name="ck_product_price_non_negative"),
        CheckConstraint("stock_quantity >= 0", name="ck_product_stock_non_negative"),
    )

    def to_entity(self) -> Product:
        return Product(
            id=self.id,
            shop_id=self.shop_id,
            name=self.name,
            description=self.description,
            price=self.price,
            sku=self.sku or "",
            stock_quantity=self.stock_quantity,
            is_active=self.is_active,
            created_at=_as_utc(self.created_at),
            updated_at=_as_utc(self.updated_at),
            version=self.version,
        )

    @classmethod
    def from_entity(cls, product: Product) -> "ProductRow":
        return cls(
            id=product.id,
            shop_id=product.shop_id,
            name=product.name,
            description=product.description,
            price=product.price,
            sku=product.sku or None,
            stock_quantity=product.stock_quantity,
            is_active=product.is_active,
            created_at=product.created_at,
            updated_at=product.updated_at,
            version=product.version,
        )
