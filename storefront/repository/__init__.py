"""
Repository layer

One repository per collection, bundled over a single document store.
"""
from storefront.db.store import DocumentStore
from storefront.repository.base import BaseRepository
from storefront.repository.cart import CartRepository
from storefront.repository.category import CategoryRepository
from storefront.repository.order import OrderRepository
from storefront.repository.product import ProductRepository
from storefront.repository.user import UserRepository


class Repositories:

    def __init__(self, store: DocumentStore):
        self.store = store
        self.product = ProductRepository(store)
        self.category = CategoryRepository(store)
        self.cart = CartRepository(store)
        self.order = OrderRepository(store)
        self.user = UserRepository(store)


__all__ = [
    "BaseRepository",
    "CartRepository",
    "CategoryRepository",
    "OrderRepository",
    "ProductRepository",
    "Repositories",
    "UserRepository",
]
