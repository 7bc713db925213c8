"""
Product API tests: ownership via the owning shop and error-kind mapping.
"""
import uuid

import pytest

from miniature.core.errors import Unavailable


@pytest.fixture
async def owned_shop(store):
    owner = await store.add_customer(name="Owner")
    shop = await store.add_shop(owner)
    return owner, shop


@pytest.mark.asyncio
async def test_owner_creates_and_lists_products(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    buyer = await store.add_customer(name="Buyer", role="CUSTOMER")

    created = await client.post(
        f"/v1/shops/{shop.id}/products",
        json={"name": "Jeans", "price": 490000, "sku": "SL38", "stock_quantity": 10},
        headers=auth_header(owner),
    )
    listed = await client.get(f"/v1/shops/{shop.id}/products", headers=auth_header(buyer))

    assert created.status_code == 201
    assert created.json()["is_active"] is True
    assert listed.status_code == 200
    assert [p["sku"] for p in listed.json()] == ["SL38"]


@pytest.mark.asyncio
async def test_negative_price_is_400(client, owned_shop, auth_header):
    owner, shop = owned_shop

    response = await client.post(
        f"/v1/shops/{shop.id}/products",
        json={"name": "Jeans", "price": -1, "stock_quantity": 1},
        headers=auth_header(owner),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
async def test_non_finite_price_is_400(client, store, owned_shop, auth_header, literal):
    owner, shop = owned_shop
    headers = {**auth_header(owner), "Content-Type": "application/json"}

    response = await client.post(
        f"/v1/shops/{shop.id}/products",
        content=f'{{"name": "Jeans", "price": {literal}, "stock_quantity": 1}}',
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_update_with_nan_price_is_400(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    product = await store.add_product(shop, price=10)
    headers = {**auth_header(owner), "Content-Type": "application/json"}

    response = await client.put(f"/v1/products/{product.id}", content='{"price": NaN}', headers=headers)

    assert response.status_code == 400
    assert store.products.rows[product.id].price == 10


@pytest.mark.asyncio
async def test_non_owner_create_is_403(client, store, owned_shop, auth_header):
    _, shop = owned_shop
    intruder = await store.add_customer(name="Intruder")

    response = await client.post(
        f"/v1/shops/{shop.id}/products", json={"name": "Jeans", "price": 1}, headers=auth_header(intruder)
    )

    assert response.status_code == 403
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_ownership_outage_is_503_not_403(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    store.ownership.fail_with = Unavailable("connection refused")

    response = await client.post(
        f"/v1/shops/{shop.id}/products", json={"name": "Jeans", "price": 1}, headers=auth_header(owner)
    )

    assert response.status_code == 503
    assert response.json()["error"]["code"] == "AUTHORIZATION_UNAVAILABLE"
    assert store.products.rows == {}


@pytest.mark.asyncio
async def test_duplicate_sku_is_409(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    await store.add_product(shop, sku="SL38")

    response = await client.post(
        f"/v1/shops/{shop.id}/products",
        json={"name": "Jeans", "price": 1, "sku": "SL38"},
        headers=auth_header(owner),
    )

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_get_product(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    product = await store.add_product(shop, name="A")

    found = await client.get(f"/v1/products/{product.id}", headers=auth_header(owner))
    missing = await client.get(f"/v1/products/{uuid.uuid4()}", headers=auth_header(owner))

    assert found.status_code == 200
    assert found.json()["name"] == "A"
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_partial_update_over_http(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    product = await store.add_product(shop, name="A", price=10)

    response = await client.put(f"/v1/products/{product.id}", json={"price": 20}, headers=auth_header(owner))

    assert response.status_code == 200
    assert response.json()["name"] == "A"
    assert response.json()["price"] == 20


@pytest.mark.asyncio
async def test_update_with_explicit_null_is_400(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    product = await store.add_product(shop, price=10)

    response = await client.put(f"/v1/products/{product.id}", json={"price": None}, headers=auth_header(owner))

    assert response.status_code == 400
    assert store.products.rows[product.id].price == 10


@pytest.mark.asyncio
async def test_non_owner_update_and_delete_are_403(client, store, owned_shop, auth_header):
    _, shop = owned_shop
    intruder = await store.add_customer(name="Intruder")
    product = await store.add_product(shop, price=10)

    update = await client.put(f"/v1/products/{product.id}", json={"price": 0}, headers=auth_header(intruder))
    delete = await client.delete(f"/v1/products/{product.id}", headers=auth_header(intruder))

    assert update.status_code == 403
    assert delete.status_code == 403
    assert store.products.rows[product.id].price == 10


@pytest.mark.asyncio
async def test_delete_then_delete_again(client, store, owned_shop, auth_header):
    owner, shop = owned_shop
    product = await store.add_product(shop)

    first = await client.delete(f"/v1/products/{product.id}", headers=auth_header(owner))
    second = await client.delete(f"/v1/products/{product.id}", headers=auth_header(owner))

    assert first.status_code == 204
    assert second.status_code == 404
    assert store.products.rows == {}
