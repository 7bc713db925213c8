"""
Product use-case tests.

Covers the LOOKUP -> OWNERSHIP_CHECK -> VALIDATE -> PERSIST sequence,
including the difference between "not the owner" (Forbidden) and "could not
check" (AuthzUnavailable).
"""
import uuid

import pytest

from miniature.core.errors import (
    AuthzUnavailable,
    ConstraintViolation,
    Forbidden,
    InvalidArgument,
    NotFound,
    Unavailable,
)
from miniature.domain import ProductChanges
from miniature.repositories import InMemoryProductRepository
from miniature.services import ProductService


class RecordingProductRepository(InMemoryProductRepository):
    def __init__(self):
        super().__init__()
        self.create_calls = 0

    async def create(self, product):
        self.create_calls += 1
        return await super().create(product)


@pytest.fixture
async def owned_shop(store):
    owner = await store.add_customer(name="Owner")
    shop = await store.add_shop(owner)
    return owner, shop


# ============================================================================
# CREATE
# ============================================================================

@pytest.mark.asyncio
async def test_owner_creates_active_product(store, owned_shop):
    owner, shop = owned_shop

    product = await store.product_service().create(
        str(shop.id), "Jeans", "Blue, size 38", 490000, "SL38", 10, str(owner.id)
    )

    assert product.is_active is True
    assert product.shop_id == shop.id
    assert store.products.rows[product.id].sku == "SL38"


@pytest.mark.asyncio
@pytest.mark.parametrize("price,stock", [(-0.01, 1), (10, -1), (-5, -5)])
async def test_negative_price_or_stock_never_reaches_repository(store, owned_shop, price, stock):
    owner, shop = owned_shop
    repo = RecordingProductRepository()
    service = ProductService(repo, store.ownership)

    with pytest.raises(InvalidArgument):
        await service.create(str(shop.id), "Jeans", "", price, "", stock, str(owner.id))

    assert repo.create_calls == 0
    assert repo.rows == {}


@pytest.mark.asyncio
@pytest.mark.parametrize("price", [float("nan"), float("inf"), float("-inf")])
async def test_non_finite_price_never_reaches_repository(store, owned_shop, price):
    owner, shop = owned_shop
    repo = RecordingProductRepository()
    service = ProductService(repo, store.ownership)

    with pytest.raises(InvalidArgument):
        await service.create(str(shop.id), "Jeans", "", price, "", 1, str(owner.id))

    assert repo.create_calls == 0


@pytest.mark.asyncio
async def test_create_with_malformed_shop_id_is_invalid(store, owned_shop):
    owner, _ = owned_shop

    with pytest.raises(InvalidArgument):
        await store.product_service().create("shop-1", "Jeans", "", 1, "", 1, str(owner.id))


@pytest.mark.asyncio
async def test_non_owner_cannot_create(store, owned_shop):
    _, shop = owned_shop
    intruder = await store.add_customer(name="Intruder")

    with pytest.raises(Forbidden):
        await store.product_service().create(str(shop.id), "Jeans", "", 1, "", 1, str(intruder.id))
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_create_in_missing_shop_is_forbidden(store, owned_shop):
    owner, _ = owned_shop

    with pytest.raises(Forbidden):
        await store.product_service().create(str(uuid.uuid4()), "Jeans", "", 1, "", 1, str(owner.id))


@pytest.mark.asyncio
async def test_ownership_check_failure_is_not_treated_as_not_owner(store, owned_shop):
    owner, shop = owned_shop
    store.ownership.fail_with = Unavailable("connection refused")

    with pytest.raises(AuthzUnavailable) as exc_info:
        await store.product_service().create(str(shop.id), "Jeans", "", 1, "", 1, str(owner.id))

    assert not isinstance(exc_info.value, Forbidden)
    assert exc_info.value.status_code == 503
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_duplicate_sku_in_same_shop_is_constraint_violation(store, owned_shop):
    owner, shop = owned_shop
    service = store.product_service()
    await service.create(str(shop.id), "Jeans", "", 1, "SL38", 1, str(owner.id))

    with pytest.raises(ConstraintViolation):
        await service.create(str(shop.id), "Other jeans", "", 2, "SL38", 1, str(owner.id))

    # Blank SKUs never collide
    await service.create(str(shop.id), "No sku 1", "", 1, "", 1, str(owner.id))
    await service.create(str(shop.id), "No sku 2", "", 1, "", 1, str(owner.id))
    assert len(store.products.rows) == 3


# ============================================================================
# UPDATE
# ============================================================================

@pytest.mark.asyncio
async def test_partial_update_keeps_unset_fields(store, owned_shop):
    owner, shop = owned_shop
    product = await store.add_product(shop, name="A", price=10)

    updated = await store.product_service().update(product.id, ProductChanges(price=20), str(owner.id))

    assert updated.name == "A"
    assert updated.price == 20
    assert store.products.rows[product.id].name == "A"
    assert store.products.rows[product.id].price == 20


@pytest.mark.asyncio
async def test_update_revalidates_price_and_stock(store, owned_shop):
    owner, shop = owned_shop
    product = await store.add_product(shop, price=10, stock_quantity=3)
    service = store.product_service()

    with pytest.raises(InvalidArgument):
        await service.update(product.id, ProductChanges(price=-1), str(owner.id))
    with pytest.raises(InvalidArgument):
        await service.update(product.id, ProductChanges(stock_quantity=-1), str(owner.id))
    with pytest.raises(InvalidArgument):
        await service.update(product.id, ProductChanges(name=None), str(owner.id))
    with pytest.raises(InvalidArgument):
        await service.update(product.id, ProductChanges(price=float("nan")), str(owner.id))
    with pytest.raises(InvalidArgument):
        await service.update(product.id, ProductChanges(is_active="yes"), str(owner.id))

    stored = store.products.rows[product.id]
    assert (stored.price, stored.stock_quantity, stored.version) == (10, 3, 1)


@pytest.mark.asyncio
async def test_update_missing_product_is_not_found_before_ownership(store, owned_shop):
    store.ownership.fail_with = Unavailable("should not be consulted")

    with pytest.raises(NotFound):
        await store.product_service().update(uuid.uuid4(), ProductChanges(price=1), str(uuid.uuid4()))


@pytest.mark.asyncio
async def test_non_owner_cannot_update(store, owned_shop):
    _, shop = owned_shop
    intruder = await store.add_customer(name="Intruder")
    product = await store.add_product(shop, price=10)

    with pytest.raises(Forbidden):
        await store.product_service().update(product.id, ProductChanges(price=0), str(intruder.id))
    assert store.products.rows[product.id].price == 10


@pytest.mark.asyncio
async def test_update_with_failing_ownership_check_leaves_product_untouched(store, owned_shop):
    owner, shop = owned_shop
    product = await store.add_product(shop, price=10)
    store.ownership.fail_with = Unavailable("timeout")

    with pytest.raises(AuthzUnavailable):
        await store.product_service().update(product.id, ProductChanges(price=99), str(owner.id))
    assert store.products.rows[product.id].price == 10


# ============================================================================
# DELETE
# ============================================================================

@pytest.mark.asyncio
async def test_deleting_nonexistent_product_is_not_found_every_time(store):
    service = store.product_service()
    product_id = uuid.uuid4()

    for _ in range(2):
        with pytest.raises(NotFound):
            await service.delete(product_id, str(uuid.uuid4()))
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_owner_deletes_then_second_delete_is_not_found(store, owned_shop):
    owner, shop = owned_shop
    product = await store.add_product(shop)
    other = await store.add_product(shop, name="B")
    service = store.product_service()

    await service.delete(product.id, str(owner.id))
    with pytest.raises(NotFound):
        await service.delete(product.id, str(owner.id))

    assert list(store.products.rows) == [other.id]


@pytest.mark.asyncio
async def test_delete_with_failing_ownership_check_keeps_product(store, owned_shop):
    owner, shop = owned_shop
    product = await store.add_product(shop)
    store.ownership.fail_with = Unavailable("timeout")

    with pytest.raises(AuthzUnavailable):
        await store.product_service().delete(product.id, str(owner.id))
    assert product.id in store.products.rows


@pytest.mark.asyncio
async def test_ownership_checker_reports_missing_shop_as_not_owner(store, owned_shop):
    owner, shop = owned_shop

    assert await store.ownership.is_owner(str(owner.id), shop.id) is True
    assert await store.ownership.is_owner(str(uuid.uuid4()), shop.id) is False
    assert await store.ownership.is_owner(str(owner.id), uuid.uuid4()) is False

    store.ownership.fail_with = Unavailable("down")
    with pytest.raises(Unavailable):
        await store.ownership.is_owner(str(owner.id), shop.id)
