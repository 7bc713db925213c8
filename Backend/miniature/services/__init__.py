"""
Use-cases for the customer, shop and product services.

Each service owns validation and authorization for its entity and talks to
storage only through the repository boundaries in miniature.repositories.
"""

from .customers import CustomerService
from .products import ProductService
from .shops import ShopService

__all__ = ["CustomerService", "ShopService", "ProductService"]
