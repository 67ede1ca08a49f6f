import pytest

from storefront.core.exceptions import (
    DocumentValidationError,
    DuplicateValueError,
    NotFoundError,
    StoreError,
)
from storefront.db.collections import CART, CATEGORIES, ORDERS, PRODUCTS


@pytest.mark.anyio
async def test_create_generates_slug_from_name(store):
    category = await store.create(CATEGORIES, {"name": "Home & Garden"})
    assert category["id"] == 1
    assert category["slug"] == "home-garden"
    assert category["created_at"] is not None


@pytest.mark.anyio
async def test_unique_slug_is_enforced(store, catalog):
    with pytest.raises(DuplicateValueError) as exc_info:
        await store.create(CATEGORIES, {"name": "Electronics"})
    assert exc_info.value.field == "slug"


@pytest.mark.anyio
async def test_negative_inventory_is_rejected(store, catalog):
    laptop = catalog["products"]["Laptop"]
    with pytest.raises(DocumentValidationError) as exc_info:
        await store.update(PRODUCTS, laptop["id"], {"inventory": -1})
    assert "inventory" in exc_info.value.errors

    unchanged = await store.find_by_id(PRODUCTS, laptop["id"], depth=0)
    assert unchanged["inventory"] == 5


@pytest.mark.anyio
async def test_missing_required_reference_is_rejected(store):
    with pytest.raises(DocumentValidationError) as exc_info:
        await store.create(PRODUCTS, {"name": "Orphan", "price": 1})
    assert "category" in exc_info.value.errors


@pytest.mark.anyio
async def test_depth_controls_reference_population(store, catalog):
    laptop = catalog["products"]["Laptop"]

    flat = await store.find_by_id(PRODUCTS, laptop["id"], depth=0)
    assert flat["category"] == catalog["electronics"]["id"]

    populated = await store.find_by_id(PRODUCTS, laptop["id"], depth=1)
    assert populated["category"]["slug"] == "electronics"


@pytest.mark.anyio
async def test_join_lists_documents_pointing_back(store, catalog):
    category = await store.find_by_id(CATEGORIES, catalog["electronics"]["id"], depth=1)
    names = sorted(product["name"] for product in category["products"])
    assert names == ["Headphones", "Laptop"]

    flat = await store.find_by_id(CATEGORIES, catalog["electronics"]["id"], depth=0)
    assert "products" not in flat


@pytest.mark.anyio
async def test_filter_operators(store, catalog):
    cheap = await store.find(PRODUCTS, {"price": {"less_than": 50}}, depth=0)
    assert sorted(d["name"] for d in cheap.docs) == ["Coffee Mug", "Headphones"]

    matched = await store.find(PRODUCTS, {"name": {"like": "LAP"}}, depth=0)
    assert [d["name"] for d in matched.docs] == ["Laptop"]

    either = await store.find(
        PRODUCTS,
        {"or": [{"slug": {"equals": "laptop"}}, {"inventory": {"equals": 0}}]},
        depth=0,
    )
    assert sorted(d["slug"] for d in either.docs) == ["laptop", "sold-out-lamp"]

    ids = [catalog["products"]["Laptop"]["id"], catalog["products"]["Coffee Mug"]["id"]]
    by_ids = await store.find(PRODUCTS, {"id": {"in": ids}, "inventory": {"greater_than": 10}}, depth=0)
    assert [d["name"] for d in by_ids.docs] == ["Coffee Mug"]


@pytest.mark.anyio
async def test_unknown_operator_raises(store):
    with pytest.raises(StoreError):
        await store.find(PRODUCTS, {"price": {"between": [1, 2]}})


@pytest.mark.anyio
async def test_unknown_operator_in_untaken_branch_raises(store, catalog):
    where = {"or": [{"name": {"equals": "Laptop"}}, {"and": [{"price": {"between": [1, 2]}}]}]}
    with pytest.raises(StoreError):
        await store.find(PRODUCTS, where)


@pytest.mark.anyio
async def test_decrement_only_while_stock_covers_it(store, catalog):
    laptop = catalog["products"]["Laptop"]  # inventory 5

    updated = await store.decrement(PRODUCTS, laptop["id"], "inventory", 3)
    assert updated["inventory"] == 2

    assert await store.decrement(PRODUCTS, laptop["id"], "inventory", 3) is None
    assert (await store.find_by_id(PRODUCTS, laptop["id"], depth=0))["inventory"] == 2

    with pytest.raises(NotFoundError):
        await store.decrement(PRODUCTS, 999, "inventory", 1)


@pytest.mark.anyio
async def test_sort_and_pagination(store, catalog):
    page = await store.find(PRODUCTS, sort="-price", limit=3, page=1, depth=0)
    assert [d["name"] for d in page.docs] == ["Laptop", "Sold Out Lamp", "Headphones"]
    assert page.total_docs == 4
    assert page.total_pages == 2
    assert page.has_next_page

    second = await store.find(PRODUCTS, sort="-price", limit=3, page=2, depth=0)
    assert [d["name"] for d in second.docs] == ["Coffee Mug"]
    assert second.has_prev_page
    assert not second.has_next_page


@pytest.mark.anyio
async def test_update_and_delete_missing_document(store):
    with pytest.raises(NotFoundError):
        await store.update(PRODUCTS, 999, {"inventory": 1})
    with pytest.raises(NotFoundError):
        await store.delete(PRODUCTS, 999)


@pytest.mark.anyio
async def test_array_rows_keep_their_ids(store, catalog, user):
    laptop = catalog["products"]["Laptop"]
    mug = catalog["products"]["Coffee Mug"]

    cart = await store.create(CART, {"user": user.id, "products": [{"product": laptop["id"], "quantity": 1}]}, depth=0)
    line_id = cart["products"][0]["id"]
    assert isinstance(line_id, str) and line_id

    updated = await store.update(
        CART,
        cart["id"],
        {"products": [
            {"id": line_id, "product": laptop["id"], "quantity": 2},
            {"product": mug["id"], "quantity": 1},
        ]},
        depth=0,
    )
    assert updated["products"][0]["id"] == line_id
    assert updated["products"][0]["quantity"] == 2
    assert updated["products"][1]["id"] not in (None, line_id)


@pytest.mark.anyio
async def test_one_cart_per_user(store, user):
    await store.create(CART, {"user": user.id})
    with pytest.raises(DuplicateValueError):
        await store.create(CART, {"user": user.id})


@pytest.mark.anyio
async def test_transaction_rolls_back_every_write(store, catalog, user):
    laptop = catalog["products"]["Laptop"]

    with pytest.raises(RuntimeError):
        async with store.transaction():
            await store.create(ORDERS, {"user": user.id, "total": 10, "items": []})
            await store.update(PRODUCTS, laptop["id"], {"inventory": 0})
            raise RuntimeError("boom")

    assert await store.count(ORDERS) == 0
    product = await store.find_by_id(PRODUCTS, laptop["id"], depth=0)
    assert product["inventory"] == 5

    # ids handed out inside the rolled back block are reused
    order = await store.create(ORDERS, {"user": user.id, "total": 10, "items": []})
    assert order["id"] == 1
    assert order["status"] == "pending"


@pytest.mark.anyio
async def test_reads_return_copies(store, catalog):
    laptop = await store.find_by_id(PRODUCTS, catalog["products"]["Laptop"]["id"], depth=0)
    laptop["inventory"] = 1000

    again = await store.find_by_id(PRODUCTS, laptop["id"], depth=0)
    assert again["inventory"] == 5
