"""
Product use-case.

Products carry no owner of their own: every mutation is authorized by asking
the ShopOwnershipChecker whether the requester owns the product's shop.

    START -> LOOKUP -> [absent: NotFound]
                    -> OWNERSHIP_CHECK -> [checker failed: AuthzUnavailable]
                                       -> [not owner: Forbidden]
                                       -> VALIDATE -> [invalid: InvalidArgument]
                                                   -> PERSIST

A failing ownership check is never read as "not owner": no product is
created, changed or deleted unless the checker positively said yes.
"""

import logging
import math
import uuid
from dataclasses import replace

from ..core.errors import AuthzUnavailable, Forbidden, InvalidArgument, NotFound, ServiceError
from ..domain import Product, ProductChanges, parse_identity, utcnow
from ..repositories.base import ProductRepository, ShopOwnershipChecker

logger = logging.getLogger(__name__)


def _validate_price(price) -> float:
    if isinstance(price, bool) or not isinstance(price, (int, float)):
        raise InvalidArgument("price must be a number")
    if not math.isfinite(price):
        raise InvalidArgument("price must be a finite number")
    if price < 0:
        raise InvalidArgument("price cannot be negative")
    return float(price)


def _validate_stock(stock_quantity) -> int:
    if isinstance(stock_quantity, bool) or not isinstance(stock_quantity, int):
        raise InvalidArgument("stock quantity must be an integer")
    if stock_quantity < 0:
        raise InvalidArgument("stock quantity cannot be negative")
    return stock_quantity


def _validate_name(name) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InvalidArgument("product name is required")
    return name.strip()


class ProductService:
    def __init__(self, repo: ProductRepository, ownership: ShopOwnershipChecker):
        self.repo = repo
        self.ownership = ownership

    async def _require_shop_owner(self, requester_id: str, shop_id: uuid.UUID, action: str) -> None:
        try:
            is_owner = await self.ownership.is_owner(requester_id, shop_id)
        except ServiceError as e:
            logger.error(f"Error checking shop ownership for user {requester_id}, shop {shop_id}: {e!r}")
            raise AuthzUnavailable("could not verify shop ownership") from e
        if not is_owner:
            logger.warning(f"Authorization failed: User {requester_id} tried to {action} in shop {shop_id}")
            raise Forbidden(f"user not authorized to {action} in this shop")

    async def create(
        self,
        shop_id,
        name: str,
        description: str,
        price: float,
        sku: str,
        stock_quantity: int,
        requester_id: str,
    ) -> Product:
        shop_uuid = parse_identity(shop_id, "shop_id")
        await self._require_shop_owner(requester_id, shop_uuid, "add products")

        now = utcnow()
        product = Product(
            id=uuid.uuid4(),
            shop_id=shop_uuid,
            name=_validate_name(name),
            description=description or "",
            price=_validate_price(price),
            sku=(sku or "").strip(),
            stock_quantity=_validate_stock(stock_quantity),
            is_active=True,
            created_at=now,
            updated_at=now,
            version=1,
        )
        # SKU conflicts within the shop surface as ConstraintViolation
        await self.repo.create(product)
        logger.info(f"Product created: {product.id} in shop {shop_uuid}")
        return product

    async def get_by_id(self, product_id) -> Product:
        product = await self.repo.get_by_id(parse_identity(product_id, "product_id"))
        if product is None:
            raise NotFound("product not found")
        return product

    async def list_by_shop(self, shop_id) -> list[Product]:
        return await self.repo.list_by_shop(parse_identity(shop_id, "shop_id"))

    async def update(self, product_id, changes: ProductChanges, requester_id: str) -> Product:
        product = await self.get_by_id(product_id)
        await self._require_shop_owner(requester_id, product.shop_id, "update products")

        changes.reject_nulls("name", "description", "price", "sku", "stock_quantity", "is_active")
        provided = changes.provided()
        updates = {}
        if "name" in provided:
            updates["name"] = _validate_name(provided["name"])
        if "description" in provided:
            updates["description"] = provided["description"]
        if "price" in provided:
            updates["price"] = _validate_price(provided["price"])
        if "sku" in provided:
            updates["sku"] = provided["sku"].strip()
        if "stock_quantity" in provided:
            updates["stock_quantity"] = _validate_stock(provided["stock_quantity"])
        if "is_active" in provided:
            if not isinstance(provided["is_active"], bool):
                raise InvalidArgument("is_active must be a boolean")
            updates["is_active"] = provided["is_active"]

        updated = replace(product, **updates, updated_at=utcnow())
        updated = await self.repo.update(updated)
        logger.info(f"Product updated: {updated.id} fields={sorted(updates)}")
        return updated

    async def delete(self, product_id, requester_id: str) -> None:
        product = await self.get_by_id(product_id)
        await self._require_shop_owner(requester_id, product.shop_id, "delete products")
        # Zero rows affected (deleted in between) is reported as NotFound
        await self.repo.delete(product.id)
        logger.info(f"Product deleted: {product.id} from shop {product.shop_id}")
