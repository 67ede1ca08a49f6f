"""
Seed the storefront with demo data.

Usage:
    python -m storefront.db.seed            # create tables, seed if empty
    python -m storefront.db.seed --reset    # drop everything first

Seeds three categories, eight products and one demo admin user
(test@gmail.com / 123456).
"""
import argparse
import asyncio
import logging
import sys

from storefront.core.config import settings
from storefront.core.database import create_tables, get_db_session
from storefront.core.security import get_password_hash
from storefront.db.collections import CATEGORIES, PRODUCTS, USERS
from storefront.db.memory import InMemoryDocumentStore
from storefront.db.sql import SQLAlchemyDocumentStore
from storefront.db.store import DocumentStore

logger = logging.getLogger(__name__)

CATEGORY_DATA = [
    {"name": "Electronics", "slug": "electronics", "description": "Technology and electronic devices"},
    {"name": "Home", "slug": "home", "description": "Home and kitchen items"},
    {"name": "Clothing", "slug": "clothing", "description": "Apparel and accessories"},
]

PRODUCT_DATA = [
    {
        "name": 'MacBook Pro 16"',
        "slug": "macbook-pro-16",
        "description": "Powerful laptop for professional work",
        "price": 2499,
        "category": "Electronics",
        "inventory": 25,
    },
    {
        "name": "iPhone 15 Pro",
        "slug": "iphone-15-pro",
        "description": "Latest iPhone with advanced camera system",
        "price": 999,
        "category": "Electronics",
        "inventory": 50,
    },
    {
        "name": "AirPods Pro",
        "slug": "airpods-pro",
        "description": "Wireless earbuds with noise cancellation",
        "price": 249,
        "category": "Electronics",
        "inventory": 100,
    },
    {
        "name": "Coffee Mug",
        "slug": "coffee-mug",
        "description": "Ceramic coffee mug for your morning brew",
        "price": 15,
        "category": "Home",
        "inventory": 200,
    },
    {
        "name": "Desk Lamp",
        "slug": "desk-lamp",
        "description": "LED desk lamp with adjustable brightness",
        "price": 89,
        "category": "Home",
        "inventory": 75,
    },
    {
        "name": "Running Shoes",
        "slug": "running-shoes",
        "description": "Comfortable running shoes for daily exercise",
        "price": 129,
        "category": "Clothing",
        "inventory": 60,
    },
    {
        "name": "Cotton T-Shirt",
        "slug": "cotton-t-shirt",
        "description": "Soft cotton t-shirt in various colors",
        "price": 25,
        "category": "Clothing",
        "inventory": 150,
    },
    {
        "name": "Bluetooth Speaker",
        "slug": "bluetooth-speaker",
        "description": "Portable speaker with excellent sound quality",
        "price": 79,
        "category": "Electronics",
        "inventory": 40,
    },
]

DEMO_USER = {"name": "Maks", "email": "test@gmail.com", "password": "123456"}


async def seed_store(store: DocumentStore) -> bool:
    """Seed an empty store. Returns False (and does nothing) if data exists."""
    if await store.count(CATEGORIES) or await store.count(PRODUCTS):
        logger.info("Store already has catalog data, skipping seed")
        return False

    async with store.transaction():
        await store.create(
            USERS,
            {
                "name": DEMO_USER["name"],
                "email": DEMO_USER["email"],
                "hashed_password": get_password_hash(DEMO_USER["password"]),
                "is_admin": True,
            },
            depth=0,
        )
        logger.info(f"Admin user created: {DEMO_USER['email']}")

        category_ids = {}
        for data in CATEGORY_DATA:
            category = await store.create(CATEGORIES, data, depth=0)
            category_ids[category["name"]] = category["id"]
        logger.info(f"Created {len(CATEGORY_DATA)} categories")

        for data in PRODUCT_DATA:
            await store.create(PRODUCTS, {**data, "category": category_ids[data["category"]]}, depth=0)
        logger.info(f"Created {len(PRODUCT_DATA)} products")

    return True


async def seed_database(reset: bool = False) -> bool:
    """Create (optionally recreate) the tables and seed them."""
    await create_tables(drop_existing=reset)
    async with get_db_session() as session:
        return await seed_store(SQLAlchemyDocumentStore(session))


async def seed_memory_store(store: InMemoryDocumentStore, reset: bool = False) -> bool:
    if reset:
        store.clear()
    return await seed_store(store)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed the storefront database with demo data")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables before seeding")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if settings.DOCUMENT_STORE != "sql":
        logger.error("Seeding from the command line needs DOCUMENT_STORE=sql")
        return 1

    logger.info(f"Seeding {settings.DATABASE_URL.split('@')[-1]}" + (" (reset)" if args.reset else ""))
    seeded = asyncio.run(seed_database(reset=args.reset))
    logger.info("Database seeded successfully" if seeded else "Nothing to do")
    return 0


if __name__ == "__main__":
    sys.exit(main())
