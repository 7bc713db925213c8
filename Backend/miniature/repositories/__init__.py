"""
Persistence boundaries for customers, shops and products.

Modules:
    base: abstract repositories and the shop ownership checker
    sql: SQLAlchemy async implementations (one session per request)
    memory: dict-backed implementations with fault injection, for tests
"""

from .base import (
    CustomerRepository,
    ShopRepository,
    ProductRepository,
    ShopOwnershipChecker,
)
from .memory import (
    InMemoryCustomerRepository,
    InMemoryShopRepository,
    InMemoryProductRepository,
    InMemoryShopOwnershipChecker,
)
from .sql import (
    SqlCustomerRepository,
    SqlShopRepository,
    SqlProductRepository,
    SqlShopOwnershipChecker,
)

__all__ = [
    "CustomerRepository",
    "ShopRepository",
    "ProductRepository",
    "ShopOwnershipChecker",
    "InMemoryCustomerRepository",
    "InMemoryShopRepository",
    "InMemoryProductRepository",
    "InMemoryShopOwnershipChecker",
    "SqlCustomerRepository",
    "SqlShopRepository",
    "SqlProductRepository",
    "SqlShopOwnershipChecker",
]
