"""
Cart routes

Reads require a signed-in user; writes go through the cart actions and
answer with an ActionResult.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends

from storefront.actions import add_to_cart_action, remove_from_cart_action, update_cart_item_action
from storefront.api.deps import get_current_user, get_repositories, require_user
from storefront.api.responses import action_response
from storefront.repository import Repositories
from storefront.schemas.cart import CartItemUpdate, CartResponse
from storefront.schemas.user import User
from storefront.services.cart_service import cart_service

router = APIRouter()


@router.get("", response_model=CartResponse)
async def get_cart(
    user: User = Depends(require_user),
    repos: Repositories = Depends(get_repositories),
):
    cart = await repos.cart.get_cart_by_user(user.id)
    if cart is None:
        return CartResponse()
    return CartResponse(id=cart.id, total=cart.total, items=cart.items, item_count=cart.item_count)


@router.post("/items")
async def add_to_cart(
    payload: Dict[str, Any] = Body(...),
    user: Optional[User] = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
):
    return action_response(await add_to_cart_action(repos, user, payload))


@router.patch("/items/{item_id}")
async def update_cart_item(
    item_id: str,
    data: CartItemUpdate,
    user: Optional[User] = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
):
    return action_response(await update_cart_item_action(repos, user, item_id, data.quantity))


@router.delete("/items/{item_id}")
async def remove_from_cart(
    item_id: str,
    user: Optional[User] = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
):
    return action_response(await remove_from_cart_action(repos, user, item_id))


@router.delete("")
async def clear_cart(
    user: User = Depends(require_user),
    repos: Repositories = Depends(get_repositories),
):
    return {"cleared": await cart_service.clear(repos, user)}
