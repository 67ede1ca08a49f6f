"""
Order service

Order history for the signed-in user and the status lifecycle:

    pending -> processing -> shipped -> delivered
       |           |
       +-----------+--> cancelled

Order lines are a checkout-time snapshot and are never rewritten here.
"""
import logging
from typing import List, Optional

from storefront.core.exceptions import InvalidStatusTransitionError, NotFoundError
from storefront.db.collections import ORDERS
from storefront.repository import Repositories
from storefront.schemas.order import Order, OrderStatus
from storefront.schemas.user import User
from storefront.services.auth_service import auth_service

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}


def can_transition(current: OrderStatus, requested: OrderStatus) -> bool:
    return requested in ALLOWED_TRANSITIONS[current]


class OrderService:

    @staticmethod
    async def list_for_user(repos: Repositories, user: Optional[User]) -> List[Order]:
        user = auth_service.require_auth(user, "You must be signed in to view orders")
        return await repos.order.list_for_user(user.id)

    @staticmethod
    async def get_for_user(repos: Repositories, user: Optional[User], order_id: int) -> Order:
        """Fetch one order; other users' orders read as not found (admins see all)."""
        user = auth_service.require_auth(user, "You must be signed in to view orders")
        order = await repos.order.get_by_id(order_id)
        owner_id = order.user.id if order is not None and order.user is not None else None
        if order is None or (owner_id != user.id and not user.is_admin):
            raise NotFoundError("Order not found", collection=ORDERS, lookup=order_id)
        return order

    @staticmethod
    async def update_status(repos: Repositories, order_id: int, status: OrderStatus) -> Order:
        status = OrderStatus(status)
        async with repos.store.transaction():
            order = await repos.order.get_by_id(order_id, depth=0, lock=True)
            if order is None:
                raise NotFoundError("Order not found", collection=ORDERS, lookup=order_id)

            if not can_transition(order.status, status):
                raise InvalidStatusTransitionError(
                    f"Cannot change order status from {order.status.value} to {status.value}",
                    current_status=order.status.value,
                    requested_status=status.value,
                )

            updated = await repos.order.update(order_id, {"status": status.value})

        logger.info(f"Order {order_id} status {order.status.value} -> {status.value}")
        return updated


# Singleton instance
order_service = OrderService()
