from storefront.models.user import User
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.cart import Cart, CartItem
from storefront.models.order import Order, OrderItem

# collection slug -> ORM model
MODELS_BY_COLLECTION = {
    model.__collection__: model
    for model in (User, Category, Product, Cart, Order)
}

__all__ = [
    "User",
    "Category",
    "Product",
    "Cart",
    "CartItem",
    "Order",
    "OrderItem",
    "MODELS_BY_COLLECTION",
]
