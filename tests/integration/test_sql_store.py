"""
SQLAlchemy document store against SQLite: in memory for most tests, a file
for the tests that need separate connections.
"""
import asyncio

import pytest
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import storefront.models  # noqa: F401
from storefront.core.database import Base
from storefront.core.exceptions import (
    DocumentValidationError,
    DuplicateValueError,
    InsufficientInventoryError,
    NotFoundError,
    StoreError,
)
from storefront.db.collections import CART, CATEGORIES, ORDERS, PRODUCTS
from storefront.db.sql import SQLAlchemyDocumentStore
from storefront.repository import Repositories
from storefront.schemas.forms import CheckoutForm
from storefront.schemas.order import Order, OrderStatus
from storefront.services.cart_service import cart_service
from storefront.services.checkout_service import checkout_service


@pytest.fixture
async def sql_store():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    async with session_factory() as session:
        yield SQLAlchemyDocumentStore(session)

    await engine.dispose()


@pytest.fixture
async def sql_catalog(sql_store):
    category = await sql_store.create(CATEGORIES, {"name": "Electronics"})
    laptop = await sql_store.create(
        PRODUCTS, {"name": "Laptop", "price": 1000, "inventory": 5, "category": category["id"]}, depth=0
    )
    mug = await sql_store.create(
        PRODUCTS, {"name": "Coffee Mug", "price": 15.5, "inventory": 10, "category": category["id"]}, depth=0
    )
    return {"category": category, "laptop": laptop, "mug": mug}


@pytest.mark.anyio
async def test_create_and_populate(sql_store, sql_catalog):
    assert sql_catalog["category"]["slug"] == "electronics"
    assert sql_catalog["laptop"]["slug"] == "laptop"

    product = await sql_store.find_by_id(PRODUCTS, sql_catalog["laptop"]["id"], depth=1)
    assert product["category"]["name"] == "Electronics"
    assert product["price"] == 1000.0

    category = await sql_store.find_by_id(CATEGORIES, sql_catalog["category"]["id"], depth=1)
    assert sorted(p["name"] for p in category["products"]) == ["Coffee Mug", "Laptop"]


@pytest.mark.anyio
async def test_filters_and_sorting(sql_store, sql_catalog):
    result = await sql_store.find(PRODUCTS, {"name": {"like": "mug"}}, depth=0)
    assert [d["name"] for d in result.docs] == ["Coffee Mug"]

    result = await sql_store.find(
        PRODUCTS,
        {"or": [{"price": {"greater_than": 500}}, {"inventory": {"less_than_equal": 10}}]},
        sort="-price",
        depth=0,
    )
    assert [d["name"] for d in result.docs] == ["Laptop", "Coffee Mug"]

    page = await sql_store.find(PRODUCTS, sort="name", limit=1, page=2, depth=0)
    assert page.total_docs == 2
    assert [d["name"] for d in page.docs] == ["Laptop"]


@pytest.mark.anyio
async def test_constraints(sql_store, sql_catalog):
    with pytest.raises(DuplicateValueError):
        await sql_store.create(CATEGORIES, {"name": "Electronics"})
    with pytest.raises(DocumentValidationError):
        await sql_store.update(PRODUCTS, sql_catalog["laptop"]["id"], {"inventory": -1})
    with pytest.raises(NotFoundError):
        await sql_store.delete(PRODUCTS, 999)


@pytest.mark.anyio
async def test_cart_lines_round_trip(sql_store, sql_catalog):
    user = await sql_store.create("users", {"name": "Jane", "email": "jane@example.com", "hashed_password": "x"})
    cart = await sql_store.create(
        CART, {"user": user["id"], "products": [{"product": sql_catalog["laptop"]["id"], "quantity": 1}]}, depth=0
    )
    line_id = cart["products"][0]["id"]

    updated = await sql_store.update(
        CART,
        cart["id"],
        {"products": [
            {"product": sql_catalog["mug"]["id"], "quantity": 3},
            {"id": line_id, "product": sql_catalog["laptop"]["id"], "quantity": 2},
        ]},
        depth=1,
    )
    assert [(row["product"]["name"], row["quantity"]) for row in updated["products"]] == [
        ("Coffee Mug", 3),
        ("Laptop", 2),
    ]
    assert updated["products"][1]["id"] == line_id

    found = await sql_store.find(CART, {"user": {"equals": user["id"]}}, depth=0)
    assert found.total_docs == 1

    with pytest.raises(DuplicateValueError):
        await sql_store.create(CART, {"user": user["id"]})


@pytest.mark.anyio
async def test_transaction_rollback(sql_store, sql_catalog):
    with pytest.raises(RuntimeError):
        async with sql_store.transaction():
            await sql_store.update(PRODUCTS, sql_catalog["laptop"]["id"], {"inventory": 0})
            await sql_store.create(CATEGORIES, {"name": "Home"})
            raise RuntimeError("boom")

    laptop = await sql_store.find_by_id(PRODUCTS, sql_catalog["laptop"]["id"], depth=0)
    assert laptop["inventory"] == 5
    assert await sql_store.count(CATEGORIES) == 1


@pytest.mark.anyio
async def test_checkout_on_sql_store(sql_store, sql_catalog):
    repos = Repositories(sql_store)
    user = await repos.user.create({"name": "Jane", "email": "jane@example.com", "hashed_password": "x"})

    await cart_service.add_item(repos, user, sql_catalog["laptop"]["id"], 10)
    await cart_service.add_item(repos, user, sql_catalog["mug"]["id"], 2)
    cart = await repos.cart.get_cart_by_user(user.id)
    assert [(item.product.name, item.quantity) for item in cart.items] == [("Laptop", 5), ("Coffee Mug", 2)]
    assert cart.total == 5031.0

    order = await checkout_service.checkout(
        repos,
        user,
        CheckoutForm(
            first_name="Jane",
            last_name="Doe",
            email="jane@example.com",
            address="1 Main Street",
            city="Springfield",
            state="IL",
            zip_code="62701",
            agree_to_terms=True,
        ),
    )

    assert order.status == OrderStatus.PROCESSING
    assert order.total == 5031.0
    assert [(line.quantity, line.price) for line in order.items] == [(5, 1000.0), (2, 15.5)]

    laptop = await sql_store.find_by_id(PRODUCTS, sql_catalog["laptop"]["id"], depth=0)
    assert laptop["inventory"] == 0
    assert await repos.cart.get_by_user(user.id) is None
    assert await sql_store.count(ORDERS) == 1


def checkout_form() -> CheckoutForm:
    return CheckoutForm(
        first_name="Jane",
        last_name="Doe",
        email="jane@example.com",
        address="1 Main Street",
        city="Springfield",
        state="IL",
        zip_code="62701",
        agree_to_terms=True,
    )


@pytest.mark.anyio
async def test_unknown_operator_raises(sql_store):
    with pytest.raises(StoreError):
        await sql_store.find(PRODUCTS, {"price": {"between": [1, 2]}})
    with pytest.raises(StoreError):
        await sql_store.find(PRODUCTS, {"or": [{"name": {"equals": "Laptop"}}, {"price": {"between": [1, 2]}}]})


@pytest.mark.anyio
async def test_decrement_is_guarded(sql_store, sql_catalog):
    laptop_id = sql_catalog["laptop"]["id"]  # inventory 5

    updated = await sql_store.decrement(PRODUCTS, laptop_id, "inventory", 4)
    assert updated["inventory"] == 1

    assert await sql_store.decrement(PRODUCTS, laptop_id, "inventory", 2) is None
    assert (await sql_store.find_by_id(PRODUCTS, laptop_id, depth=0))["inventory"] == 1

    with pytest.raises(NotFoundError):
        await sql_store.decrement(PRODUCTS, 999, "inventory", 1)


@pytest.fixture
async def file_engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'storefront.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.mark.anyio
async def test_concurrent_checkouts_on_separate_sessions_do_not_oversell(file_engine):
    session_factory = async_sessionmaker(file_engine, expire_on_commit=False)

    async with session_factory() as session:
        repos = Repositories(SQLAlchemyDocumentStore(session))
        category = await repos.category.create({"name": "Electronics"})
        headphones = await repos.product.create(
            {"name": "Headphones", "price": 49.99, "inventory": 3, "category": category.id}, depth=0
        )
        buyers = []
        for name, email in [("Jane", "jane@example.com"), ("John", "john@example.com")]:
            buyer = await repos.user.create({"name": name, "email": email, "hashed_password": "x"}, depth=0)
            await cart_service.add_item(repos, buyer, headphones.id, 2)
            buyers.append(buyer)

    async def checkout_as(buyer):
        async with session_factory() as session:
            repos = Repositories(SQLAlchemyDocumentStore(session))
            return await checkout_service.checkout(repos, buyer, checkout_form())

    results = await asyncio.gather(*(checkout_as(buyer) for buyer in buyers), return_exceptions=True)

    orders = [r for r in results if isinstance(r, Order)]
    failures = [r for r in results if isinstance(r, Exception)]
    assert len(orders) == 1
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientInventoryError)

    async with session_factory() as session:
        store = SQLAlchemyDocumentStore(session)
        assert (await store.find_by_id(PRODUCTS, headphones.id, depth=0))["inventory"] == 1
        assert await store.count(ORDERS) == 1
        assert await store.count(CART) == 1
