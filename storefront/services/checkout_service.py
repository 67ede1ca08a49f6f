"""
Checkout service

Turns the user's cart into an order:

1. validate every line against current product inventory
2. compute the total from current prices
3. create the order with snapshot prices
4. decrement inventory
5. delete the cart

Steps 1-5 run in one store transaction, so either all of them happen or none
do. Inventory is decremented against the stored value and only while it
still covers the order, so two checkouts of the last unit cannot both
succeed even when the backend does not lock the rows read in step 1.
Payment is simulated afterwards by a short delay, then the order moves to
``processing``.
"""
import asyncio
import logging
import time
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Optional

from storefront.core.config import settings
from storefront.core.exceptions import (
    BusinessError,
    EmptyCartError,
    InsufficientInventoryError,
    NotFoundError,
    StorefrontError,
)
from storefront.core.utils import money_to_float, to_money
from storefront.db.collections import PRODUCTS
from storefront.repository import Repositories
from storefront.schemas.forms import CheckoutForm
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.product import Product
from storefront.schemas.user import User
from storefront.services.auth_service import auth_service
from storefront.services.order_service import order_service

logger = logging.getLogger(__name__)

EMPTY_CART_MESSAGE = "Your cart is empty"
UNAVAILABLE_MESSAGE = "One or more products in your cart are no longer available"


def _unavailable(product_id: int) -> BusinessError:
    return BusinessError(UNAVAILABLE_MESSAGE, code="PRODUCT_UNAVAILABLE", details={"product_id": product_id})


def _insufficient(product: Product, requested: int) -> InsufficientInventoryError:
    return InsufficientInventoryError(
        f"Sorry, only {product.inventory} {product.name}(s) available",
        product_id=product.id,
        product_name=product.name,
        requested_qty=requested,
        available_qty=product.inventory,
    )


class CheckoutService:

    @staticmethod
    async def _lock_products(repos: Repositories, product_ids) -> Dict[int, Product]:
        result = await repos.store.find(PRODUCTS, {"id": {"in": list(product_ids)}}, depth=0, lock=True)
        return {doc["id"]: Product.model_validate(doc) for doc in result.docs}

    @staticmethod
    async def _reserve(repos: Repositories, product_id: int, quantity: int) -> None:
        try:
            reserved = await repos.product.reserve_inventory(product_id, quantity)
        except NotFoundError:
            raise _unavailable(product_id)
        if reserved is None:
            # Another checkout took the stock since it was read
            current = await repos.product.get_by_id(product_id, depth=0)
            if current is None:
                raise _unavailable(product_id)
            raise _insufficient(current, quantity)

    @staticmethod
    async def _mark_paid(repos: Repositories, order: Order) -> Order:
        if settings.CHECKOUT_PAYMENT_DELAY_SECONDS > 0:
            await asyncio.sleep(settings.CHECKOUT_PAYMENT_DELAY_SECONDS)
        try:
            return await order_service.update_status(repos, order.id, OrderStatus.PROCESSING)
        except StorefrontError as e:
            # The order and stock changes are committed; it stays pending
            logger.warning(f"Order {order.id} placed but not moved to processing: {e.code}: {e.message}")
            return order

    @staticmethod
    async def checkout(repos: Repositories, user: Optional[User], form: CheckoutForm) -> Order:
        """
        Place an order for everything in the user's cart.

        ``form`` carries the shipping details; it is validated before this
        is called and not stored.

        Raises:
            AuthorizationError: no signed-in user
            EmptyCartError: no cart, or a cart without lines
            BusinessError: a line's product no longer exists
            InsufficientInventoryError: a line asks for more than is in stock
        """
        user = auth_service.require_auth(user, "You must be signed in to checkout")
        started = time.monotonic()

        async with repos.store.transaction():
            cart = await repos.cart.get_by_user(user.id, lock=True)
            if cart is None or not cart.products:
                raise EmptyCartError(EMPTY_CART_MESSAGE)

            requested: "OrderedDict[int, int]" = OrderedDict()
            for line in cart.products:
                requested[line.product.id] = requested.get(line.product.id, 0) + line.quantity

            products = await CheckoutService._lock_products(repos, requested)

            total = Decimal("0.00")
            items = []
            for line in cart.products:
                product = products.get(line.product.id)
                if product is None:
                    raise _unavailable(line.product.id)
                if product.inventory < requested[product.id]:
                    raise _insufficient(product, requested[product.id])

                price = to_money(product.price)
                total += price * line.quantity
                items.append({"product": product.id, "quantity": line.quantity, "price": money_to_float(price)})

            order = await repos.order.create(
                {
                    "user": user.id,
                    "status": OrderStatus.PENDING.value,
                    "items": items,
                    "total": money_to_float(total),
                },
                depth=0,
            )

            for product_id, quantity in requested.items():
                await CheckoutService._reserve(repos, product_id, quantity)

            await repos.cart.delete(cart.id)

        order = await CheckoutService._mark_paid(repos, order)

        duration_ms = (time.monotonic() - started) * 1000
        logger.info(
            f"CHECKOUT_METRIC: user={user.id} order={order.id} total={order.total:.2f} "
            f"items={len(items)} duration_ms={duration_ms:.0f}"
        )
        return order


# Singleton instance
checkout_service = CheckoutService()
