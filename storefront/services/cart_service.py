"""
Cart service

Add, change and remove cart lines. A line's quantity never exceeds the
product's inventory at the time of the write: every write clamps.
The full line list is written back on each change; existing lines keep
their ids.
"""
import logging
from typing import Any, Dict, List, Optional

from storefront.core.exceptions import InsufficientInventoryError, NotFoundError
from storefront.db.collections import CART, PRODUCTS
from storefront.repository import Repositories
from storefront.schemas.cart import Cart
from storefront.schemas.product import Product
from storefront.schemas.user import User
from storefront.services.auth_service import auth_service

logger = logging.getLogger(__name__)

CART_ITEM_NOT_FOUND = "Cart item not found"


def accepted_quantity(inventory: int, quantity: int) -> int:
    return quantity if inventory >= quantity else inventory


def _lines_of(cart: Cart) -> List[Dict[str, Any]]:
    return [
        {"id": line.id, "product": line.product.id, "quantity": line.quantity}
        for line in cart.products
    ]


class CartService:

    @staticmethod
    async def _get_product(repos: Repositories, product_id: int) -> Product:
        product = await repos.product.get_by_id(product_id, depth=0)
        if product is None:
            raise NotFoundError("Product does not exist", collection=PRODUCTS, lookup=product_id)
        if not product.in_stock:
            raise InsufficientInventoryError(
                f"Sorry, {product.name} is out of stock",
                product_id=product.id,
                product_name=product.name,
                requested_qty=1,
                available_qty=product.inventory,
            )
        return product

    @staticmethod
    async def add_item(repos: Repositories, user: Optional[User], product_id: int, quantity: int) -> Product:
        """
        Add ``quantity`` of a product to the user's cart.

        - no cart yet: one is created holding this line
        - product already in the cart: quantities are summed
        - otherwise a new line is appended
        In every case the resulting line is clamped to inventory.
        """
        user = auth_service.require_auth(user, "You must be signed in to add items to cart")

        async with repos.store.transaction():
            product = await CartService._get_product(repos, product_id)
            cart = await repos.cart.get_by_user(user.id, lock=True)

            if cart is None:
                await repos.cart.create(
                    {
                        "user": user.id,
                        "products": [
                            {"product": product.id, "quantity": accepted_quantity(product.inventory, quantity)}
                        ],
                    },
                    depth=0,
                )
            else:
                lines = _lines_of(cart)
                current = cart.find_line(product.id)
                if current is not None:
                    existing = next(line for line in lines if line["id"] == current.id)
                    existing["quantity"] = accepted_quantity(product.inventory, current.quantity + quantity)
                else:
                    lines.append({"product": product.id, "quantity": accepted_quantity(product.inventory, quantity)})
                await repos.cart.update(cart.id, {"products": lines}, depth=0)

        logger.info(f"User {user.id} added product {product.id} x{quantity} to cart")
        return product

    @staticmethod
    async def update_item(repos: Repositories, user: Optional[User], cart_item_id: str, quantity: int) -> Cart:
        """Set a line's quantity (clamped to inventory); 0 removes the line."""
        user = auth_service.require_auth(user, "You must be signed in to modify cart")
        if quantity <= 0:
            return await CartService.remove_item(repos, user, cart_item_id)

        async with repos.store.transaction():
            cart = await repos.cart.get_by_user(user.id, lock=True)
            lines = _lines_of(cart) if cart is not None else []
            line = next((line for line in lines if line["id"] == cart_item_id), None)
            if line is None:
                raise NotFoundError(CART_ITEM_NOT_FOUND, collection=CART, lookup=cart_item_id)

            product = await CartService._get_product(repos, line["product"])
            line["quantity"] = accepted_quantity(product.inventory, quantity)
            return await repos.cart.update(cart.id, {"products": lines})

    @staticmethod
    async def remove_item(repos: Repositories, user: Optional[User], cart_item_id: str) -> Cart:
        user = auth_service.require_auth(user, "You must be signed in to modify cart")

        async with repos.store.transaction():
            cart = await repos.cart.get_by_user(user.id, lock=True)
            if cart is None:
                raise NotFoundError(CART_ITEM_NOT_FOUND, collection=CART, lookup=cart_item_id)

            lines = _lines_of(cart)
            remaining = [line for line in lines if line["id"] != cart_item_id]
            if len(remaining) == len(lines):
                raise NotFoundError(CART_ITEM_NOT_FOUND, collection=CART, lookup=cart_item_id)

            updated = await repos.cart.update(cart.id, {"products": remaining})

        logger.info(f"User {user.id} removed cart item {cart_item_id}")
        return updated

    @staticmethod
    async def clear(repos: Repositories, user: Optional[User]) -> bool:
        """Delete the user's cart. Returns False when there was none."""
        user = auth_service.require_auth(user, "You must be signed in to modify cart")
        cart = await repos.cart.get_by_user(user.id)
        if cart is None:
            return False
        await repos.cart.delete(cart.id)
        logger.info(f"User {user.id} cleared cart {cart.id}")
        return True


# Singleton instance
cart_service = CartService()
