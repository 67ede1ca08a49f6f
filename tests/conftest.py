"""
Pytest configuration and fixtures for storefront tests.
"""
import os

import pytest

# Set test environment before importing app modules
os.environ["ENVIRONMENT"] = "development"
os.environ["SECRET_KEY"] = "test-key-for-unit-tests-only"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DOCUMENT_STORE"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["COOKIE_SECURE"] = "false"
os.environ["CHECKOUT_PAYMENT_DELAY_SECONDS"] = "0"

from storefront.db.collections import CATEGORIES, PRODUCTS  # noqa: E402
from storefront.db.memory import InMemoryDocumentStore  # noqa: E402
from storefront.repository import Repositories  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def repos(store) -> Repositories:
    return Repositories(store)


@pytest.fixture
async def catalog(store):
    """Two categories and a handful of products with known stock."""
    electronics = await store.create(CATEGORIES, {"name": "Electronics", "description": "Gadgets"})
    home = await store.create(CATEGORIES, {"name": "Home"})

    products = {}
    for name, price, inventory, category in [
        ("Laptop", 1000, 5, electronics),
        ("Headphones", 49.99, 3, electronics),
        ("Coffee Mug", 15, 200, home),
        ("Sold Out Lamp", 89, 0, home),
    ]:
        doc = await store.create(
            PRODUCTS,
            {"name": name, "price": price, "inventory": inventory, "category": category["id"]},
            depth=0,
        )
        products[name] = doc

    return {"electronics": electronics, "home": home, "products": products}


@pytest.fixture
async def user(repos):
    return await repos.user.create(
        {"name": "Test User", "email": "user@example.com", "hashed_password": "not-a-real-hash"},
        depth=0,
    )


@pytest.fixture
async def other_user(repos):
    return await repos.user.create(
        {"name": "Other User", "email": "other@example.com", "hashed_password": "not-a-real-hash"},
        depth=0,
    )
