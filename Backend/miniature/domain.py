"""
Domain entities shared by the customer, shop and product services.

Entities are plain dataclasses; persistence rows live in models.py and are
converted at the repository boundary.

Partial updates use *Changes values whose fields default to UNSET. A field is
applied only when it is not UNSET, so "not provided" and "set to None/empty"
stay distinguishable (e.g. clearing a shop address vs. leaving it alone).
"""

import uuid
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Optional, Union

from .core.errors import InvalidArgument


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_identity(value: Union[str, uuid.UUID], field_name: str = "id") -> uuid.UUID:
    """Parse an identifier, raising InvalidArgument when it is not a UUID."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"invalid {field_name} format", details={field_name: str(value)}) from e


def same_identity(a: Union[str, uuid.UUID], b: Union[str, uuid.UUID]) -> bool:
    """Compare two identifiers by their canonical UUID string."""
    try:
        return parse_identity(a) == parse_identity(b)
    except InvalidArgument:
        return str(a) == str(b)


class _Unset:
    _instance: Optional["_Unset"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


class _Changes:
    """Mixin for *Changes dataclasses: exposes only the provided fields."""

    def provided(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not UNSET}

    def is_empty(self) -> bool:
        return not self.provided()

    def reject_nulls(self, *names: str) -> None:
        provided = self.provided()
        for name in names:
            if name in provided and provided[name] is None:
                raise InvalidArgument(f"{name} cannot be null")


# ────────────────────────────────────────────────────────────────
# Customer
# ────────────────────────────────────────────────────────────────

@dataclass
class Customer:
    id: uuid.UUID
    phone: str
    name: str
    role: str
    total_spent: float = 0.0
    cashback_balance: float = 0.0
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class CustomerChanges(_Changes):
    name: Any = UNSET
    phone: Any = UNSET
    role: Any = UNSET
    total_spent: Any = UNSET
    cashback_balance: Any = UNSET
    is_active: Any = UNSET


# ────────────────────────────────────────────────────────────────
# Shop
# ────────────────────────────────────────────────────────────────

@dataclass
class Shop:
    id: uuid.UUID
    name: str
    owner_id: uuid.UUID
    address: Optional[str] = None
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    version: int = 1


@dataclass(frozen=True)
class ShopChanges(_Changes):
    name: Any = UNSET
    address: Any = UNSET
    is_active: Any = UNSET


# ────────────────────────────────────────────────────────────────
# Product
# ────────────────────────────────────────────────────────────────

@dataclass
class Product:
    id: uuid.UUID
    shop_id: uuid.UUID
    name: str
    description: str = ""
    price: float = 0.0
    sku: str = ""
    stock_quantity: int = 0
    is_active: bool = True
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    version: int = 1


@dataclass(frozen=True)
class ProductChanges(_Changes):
    name: Any = UNSET
    description: Any = UNSET
    price: Any = UNSET
    sku: Any = UNSET
    stock_quantity: Any = UNSET
    is_active: Any = UNSET
