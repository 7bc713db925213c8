"""
Repository boundaries.

Every implementation honours the same contract:
    - get_* returns None when the row is absent, list_* returns [] when empty
    - uniqueness violations raise ConstraintViolation
    - update/delete affecting zero rows raise NotFound
    - update writes only if the stored version matches the entity's version,
      otherwise ConstraintViolation (concurrent modification)
    - any other datastore failure raises Unavailable
"""

import uuid
from abc import ABC, abstractmethod
from typing import Optional

from ..domain import Customer, Product, Shop


class CustomerRepository(ABC):
    @abstractmethod
    async def create(self, customer: Customer) -> Customer: ...

    @abstractmethod
    async def get_by_id(self, customer_id: uuid.UUID) -> Optional[Customer]: ...

    @abstractmethod
    async def get_by_phone(self, phone: str) -> Optional[Customer]: ...

    @abstractmethod
    async def update(self, customer: Customer) -> Customer: ...


class ShopRepository(ABC):
    @abstractmethod
    async def create(self, shop: Shop) -> Shop: ...

    @abstractmethod
    async def get_by_id(self, shop_id: uuid.UUID) -> Optional[Shop]: ...

    @abstractmethod
    async def list_by_owner(self, owner_id: uuid.UUID) -> list[Shop]: ...

    @abstractmethod
    async def update(self, shop: Shop) -> Shop:
        """Persist shop; returns it with the bumped version."""

    @abstractmethod
    async def delete(self, shop_id: uuid.UUID) -> None: ...


class ProductRepository(ABC):
    @abstractmethod
    async def create(self, product: Product) -> Product: ...

    @abstractmethod
    async def get_by_id(self, product_id: uuid.UUID) -> Optional[Product]: ...

    @abstractmethod
    async def list_by_shop(self, shop_id: uuid.UUID) -> list[Product]: ...

    @abstractmethod
    async def update(self, product: Product) -> Product:
        """Persist product; returns it with the bumped version."""

    @abstractmethod
    async def delete(self, product_id: uuid.UUID) -> None: ...


class ShopOwnershipChecker(ABC):
    """Authorization primitive used by the product use-case."""

    @abstractmethod
    async def is_owner(self, subject_id: str, shop_id: uuid.UUID) -> bool:
        """
        True when subject_id owns shop_id.

        A missing shop is reported as False. A datastore failure raises
        Unavailable and must never be read as "not owner".
        """
