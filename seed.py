# seed.py
import asyncio
import logging
from decimal import Decimal

from databases import Database
from sqlalchemy import func, select

import config
import crud
import schemas
from database import database, create_tables, drop_tables

logger = logging.getLogger(__name__)

SAMPLE_PRODUCTS = [
    {
        "name": "Açaí 300ml",
        "description": "Açaí puro de qualidade premium, perfeito para uma refeição leve",
        "price": Decimal("12.90"),
        "size": "300ml",
        "image": "/attached_assets/product_images/acai_300ml.jpg",
    },
    {
        "name": "Açaí 500ml",
        "description": "Porção generosa de açaí premium para você se deliciar",
        "price": Decimal("18.90"),
        "size": "500ml",
        "image": "/attached_assets/product_images/acai_500ml.jpg",
    },
    {
        "name": "Combo Duo",
        "description": "2x 300ml de açaí premium",
        "price": Decimal("22.90"),
        "size": "2x 300ml",
        "image": "/attached_assets/product_images/combo_duo.jpg",
        "promo_badge": "ECONOMIZE R$ 2,90",
        "highlight_order": 1,
    },
]

SAMPLE_TOPPINGS = [
    ("Morango", "fruit", 1),
    ("Banana", "fruit", 2),
    ("Kiwi", "fruit", 3),
    ("Granola", "topping", 1),
    ("Chocolate", "topping", 2),
    ("Leite Condensado", "extra", 1),
]


async def create_sample_data(db: Database):
    """Create sample products, toppings and the default admin when missing."""
    product_count = await db.fetch_val(select(func.count()).select_from(crud.products_table))
    if not product_count:
        for product in SAMPLE_PRODUCTS:
            await crud.create_product(db, schemas.ProductCreate(**product))
        logger.info("Created %d sample products", len(SAMPLE_PRODUCTS))

    topping_count = await db.fetch_val(select(func.count()).select_from(crud.toppings_table))
    if not topping_count:
        for name, category, display_order in SAMPLE_TOPPINGS:
            await crud.create_topping(db, name, category, display_order=display_order)
        logger.info("Created %d sample toppings", len(SAMPLE_TOPPINGS))

    if not await crud.get_admin_by_email(db, config.DEFAULT_ADMIN_EMAIL):
        await crud.create_admin_user(db, config.DEFAULT_ADMIN_EMAIL, config.DEFAULT_ADMIN_PASSWORD, "Administrador")
        logger.info("Default admin %s created", config.DEFAULT_ADMIN_EMAIL)


async def reset_database():
    logger.warning("Resetting database %s", config.DATABASE_URL)
    drop_tables()
    create_tables()

    await database.connect()
    try:
        await create_sample_data(database)
    finally:
        await database.disconnect()
    logger.info("Database reset complete, admin login: %s", config.DEFAULT_ADMIN_EMAIL)


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    asyncio.run(reset_database())
