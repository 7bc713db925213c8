"""
In-memory repositories.

Same contract as the SQL repositories, backed by dicts. Used by the test
suite and for running the API without a database. Every repository accepts a
``fail_with`` exception; when set, each call raises it, which is how tests
simulate a datastore outage.
"""

import copy
import uuid
from typing import Optional

from ..core.errors import ConstraintViolation, NotFound
from ..domain import Customer, Product, Shop, same_identity
from .base import CustomerRepository, ProductRepository, ShopOwnershipChecker, ShopRepository


class _FaultInjectable:
    fail_with: Optional[Exception] = None

    def _check_fault(self) -> None:
        if self.fail_with is not None:
            raise self.fail_with


class InMemoryCustomerRepository(_FaultInjectable, CustomerRepository):
    def __init__(self):
        self.rows: dict[uuid.UUID, Customer] = {}

    async def create(self, customer: Customer) -> Customer:
        self._check_fault()
        if any(row.phone == customer.phone for row in self.rows.values()):
            raise ConstraintViolation("phone number already registered")
        self.rows[customer.id] = copy.deepcopy(customer)
        return customer

    async def get_by_id(self, customer_id: uuid.UUID) -> Optional[Customer]:
        self._check_fault()
        row = self.rows.get(customer_id)
        return copy.deepcopy(row) if row else None

    async def get_by_phone(self, phone: str) -> Optional[Customer]:
        self._check_fault()
        for row in self.rows.values():
            if row.phone == phone:
                return copy.deepcopy(row)
        return None

    async def update(self, customer: Customer) -> Customer:
        self._check_fault()
        if customer.id not in self.rows:
            raise NotFound("customer not found")
        if any(row.phone == customer.phone and row.id != customer.id for row in self.rows.values()):
            raise ConstraintViolation("phone number already registered")
        self.rows[customer.id] = copy.deepcopy(customer)
        return customer


class InMemoryShopRepository(_FaultInjectable, ShopRepository):
    def __init__(self):
        self.rows: dict[uuid.UUID, Shop] = {}

    async def create(self, shop: Shop) -> Shop:
        self._check_fault()
        if shop.id in self.rows:
            raise ConstraintViolation("shop already exists")
        self.rows[shop.id] = copy.deepcopy(shop)
        return shop

    async def get_by_id(self, shop_id: uuid.UUID) -> Optional[Shop]:
        self._check_fault()
        row = self.rows.get(shop_id)
        return copy.deepcopy(row) if row else None

    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Shop]:
        self._check_fault()
        shops = [copy.deepcopy(row) for row in self.rows.values() if row.owner_id == owner_id]
        return sorted(shops, key=lambda s: s.created_at, reverse=True)

    async def update(self, shop: Shop) -> Shop:
        self._check_fault()
        stored = self.rows.get(shop.id)
        if stored is None:
            raise NotFound("shop not found")
        if stored.version != shop.version:
            raise ConstraintViolation("shop was modified concurrently, reload and retry")
        shop.version += 1
        self.rows[shop.id] = copy.deepcopy(shop)
        return shop

    async def delete(self, shop_id: uuid.UUID) -> None:
        self._check_fault()
        if self.rows.pop(shop_id, None) is None:
            raise NotFound("shop not found")


class InMemoryProductRepository(_FaultInjectable, ProductRepository):
    def __init__(self):
        self.rows: dict[uuid.UUID, Product] = {}

    def _sku_taken(self, product: Product) -> bool:
        if not product.sku:
            return False
        return any(
            row.shop_id == product.shop_id and row.sku == product.sku and row.id != product.id
            for row in self.rows.values()
        )

    async def create(self, product: Product) -> Product:
        self._check_fault()
        if self._sku_taken(product):
            raise ConstraintViolation("product with this SKU already exists in this shop")
        self.rows[product.id] = copy.deepcopy(product)
        return product

    async def get_by_id(self, product_id: uuid.UUID) -> Optional[Product]:
        self._check_fault()
        row = self.rows.get(product_id)
        return copy.deepcopy(row) if row else None

    async def list_by_shop(self, shop_id: uuid.UUID) -> list[Product]:
        self._check_fault()
        products = [copy.deepcopy(row) for row in self.rows.values() if row.shop_id == shop_id]
        return sorted(products, key=lambda p: p.created_at)

    async def update(self, product: Product) -> Product:
        self._check_fault()
        stored = self.rows.get(product.id)
        if stored is None or stored.shop_id != product.shop_id:
            raise NotFound("product not found")
        if stored.version != product.version:
            raise ConstraintViolation("product was modified concurrently, reload and retry")
        if self._sku_taken(product):
            raise ConstraintViolation("product with this SKU already exists in this shop")
        product.version += 1
        self.rows[product.id] = copy.deepcopy(product)
        return product

    async def delete(self, product_id: uuid.UUID) -> None:
        self._check_fault()
        if self.rows.pop(product_id, None) is None:
            raise NotFound("product not found")


class InMemoryShopOwnershipChecker(_FaultInjectable, ShopOwnershipChecker):
    """Answers ownership from an InMemoryShopRepository's rows."""

    def __init__(self, shops: InMemoryShopRepository):
        self.shops = shops

    async def is_owner(self, subject_id: str, shop_id: uuid.UUID) -> bool:
        self._check_fault()
        shop = self.shops.rows.get(shop_id)
        if shop is None:
            return False
        return same_identity(shop.owner_id, subject_id)
