from fastapi import APIRouter, Depends

from storefront.api.deps import get_repositories, require_admin, require_user
from storefront.repository import Repositories
from storefront.schemas.order import Order, OrderList, OrderStatusUpdate
from storefront.schemas.user import User
from storefront.services.order_service import order_service

router = APIRouter()


@router.get("", response_model=OrderList)
async def list_orders(
    user: User = Depends(require_user),
    repos: Repositories = Depends(get_repositories),
):
    """Current user's orders, newest first"""
    orders = await order_service.list_for_user(repos, user)
    return OrderList(orders=orders, total=len(orders))


@router.get("/{order_id}", response_model=Order)
async def get_order(
    order_id: int,
    user: User = Depends(require_user),
    repos: Repositories = Depends(get_repositories),
):
    return await order_service.get_for_user(repos, user, order_id)


@router.patch("/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    admin: User = Depends(require_admin),
    repos: Repositories = Depends(get_repositories),
):
    return await order_service.update_status(repos, order_id, data.status)
