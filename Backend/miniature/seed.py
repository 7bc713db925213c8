import logging

from sqlalchemy import select

from .domain import utcnow
from .models import CustomerRow, ProductRow, ShopRow

logger = logging.getLogger(__name__)


SEED_CUSTOMERS = [
    {"phone": "09121234567", "name": "Alice", "role": "OWNER"},
    {"phone": "09121234568", "name": "Bob", "role": "CUSTOMER"},
    {"phone": "09121234569", "name": "Charlie", "role": "SELLER"},
]

# owner phone -> (shop name, address)
SEED_SHOPS = {
    "09121234567": ("Alice's Boutique", "Women's clothing"),
    "09121234569": ("Charlie's Accessories", "Accessories and jewelry"),
}

# shop name -> products
SEED_PRODUCTS = {
    "Alice's Boutique": [
        {"sku": "SL38", "name": "Women's jeans", "description": "Blue jeans, size 38", "price": 490000, "stock_quantity": 10},
    ],
    "Charlie's Accessories": [
        {"sku": "BLK01", "name": "Black leather bag", "description": "Classic leather shoulder bag", "price": 750000, "stock_quantity": 5},
    ],
}


async def seed_initial_data(session) -> None:
    """Insert demo customers, shops and products. Safe to run repeatedly."""
    customers = {}
    for data in SEED_CUSTOMERS:
        result = await session.execute(select(CustomerRow).where(CustomerRow.phone == data["phone"]))
        customer = result.scalar_one_or_none()
        if not customer:
            customer = CustomerRow(**data, created_at=utcnow())
            session.add(customer)
            await session.flush()
            logger.info(f"Seeded customer {customer.id} ({customer.role})")
        customers[data["phone"]] = customer

    shops = {}
    for phone, (name, address) in SEED_SHOPS.items():
        owner = customers[phone]
        result = await session.execute(
            select(ShopRow).where(ShopRow.owner_id == owner.id, ShopRow.name == name)
        )
        shop = result.scalar_one_or_none()
        if not shop:
            now = utcnow()
            shop = ShopRow(owner_id=owner.id, name=name, address=address, created_at=now, updated_at=now)
            session.add(shop)
            await session.flush()
            logger.info(f"Seeded shop {shop.id} for owner {owner.id}")
        shops[name] = shop

    for shop_name, products in SEED_PRODUCTS.items():
        shop = shops[shop_name]
        result = await session.execute(select(ProductRow.sku).where(ProductRow.shop_id == shop.id))
        existing = set(result.scalars().all())
        now = utcnow()
        session.add_all(
            [
                ProductRow(shop_id=shop.id, created_at=now, updated_at=now, **product)
                for product in products
                if product["sku"] not in existing
            ]
        )

    await session.commit()
