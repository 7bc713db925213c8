import logging
import uuid
from dataclasses import replace

from ..core.errors import Forbidden, InvalidArgument, NotFound
from ..domain import Shop, ShopChanges, parse_identity, same_identity, utcnow
from ..repositories.base import ShopRepository

logger = logging.getLogger(__name__)


def _clean_name(value) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument("shop name cannot be empty or whitespace")
    return value.strip()


def _clean_address(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise InvalidArgument("address must be a string")
    return value.strip() or None


class ShopService:
    """
    Shop lifecycle. Only the owner recorded at creation may update or delete.

    Update and delete follow LOOKUP -> OWNERSHIP -> VALIDATE -> PERSIST; the
    repository's version check turns a lost update into a ConstraintViolation.
    """

    def __init__(self, repo: ShopRepository):
        self.repo = repo

    async def create(self, name: str, owner_id, address=None) -> Shop:
        now = utcnow()
        shop = Shop(
            id=uuid.uuid4(),
            name=_clean_name(name),
            owner_id=parse_identity(owner_id, "owner_id"),
            address=_clean_address(address),
            is_active=True,
            created_at=now,
            updated_at=now,
            version=1,
        )
        await self.repo.create(shop)
        logger.info(f"Shop created: {shop.id} by owner {shop.owner_id}")
        return shop

    async def get_by_id(self, shop_id) -> Shop:
        shop = await self.repo.get_by_id(parse_identity(shop_id, "shop_id"))
        if shop is None:
            raise NotFound("shop not found")
        return shop

    async def list_by_owner(self, owner_id) -> list[Shop]:
        return await self.repo.list_by_owner(parse_identity(owner_id, "owner_id"))

    async def _load_owned(self, shop_id, requester_id: str, action: str) -> Shop:
        shop = await self.get_by_id(shop_id)
        if not same_identity(shop.owner_id, requester_id):
            logger.warning(f"Authorization failed: User {requester_id} tried to {action} shop {shop.id}")
            raise Forbidden(f"user is not authorized to {action} this shop")
        return shop

    async def update(self, shop_id, requester_id: str, changes: ShopChanges) -> Shop:
        shop = await self._load_owned(shop_id, requester_id, "update")

        changes.reject_nulls("name", "is_active")
        provided = changes.provided()
        updates = {}
        if "name" in provided:
            updates["name"] = _clean_name(provided["name"])
        if "address" in provided:
            updates["address"] = _clean_address(provided["address"])
        if "is_active" in provided:
            if not isinstance(provided["is_active"], bool):
                raise InvalidArgument("is_active must be a boolean")
            updates["is_active"] = provided["is_active"]

        updated = replace(shop, **updates, updated_at=utcnow())
        updated = await self.repo.update(updated)
        logger.info(f"Shop updated: {updated.id} fields={sorted(updates)}")
        return updated

    async def delete(self, shop_id, requester_id: str) -> None:
        shop = await self._load_owned(shop_id, requester_id, "delete")
        await self.repo.delete(shop.id)
        logger.info(f"Shop deleted: {shop.id} by owner {requester_id}")
