from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Request

from storefront.actions import checkout_action
from storefront.api.deps import get_current_user, get_repositories
from storefront.api.responses import action_response
from storefront.core.config import settings
from storefront.core.rate_limit import limiter
from storefront.repository import Repositories
from storefront.schemas.user import User

router = APIRouter()


@router.post("/checkout")
@limiter.limit(settings.RATE_LIMIT_CHECKOUT)
async def checkout(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    user: Optional[User] = Depends(get_current_user),
    repos: Repositories = Depends(get_repositories),
):
    """Place an order for the current cart; on success the client goes to the order page"""
    result = await checkout_action(repos, user, payload)
    if result.success:
        return action_response(result, success_status=201, redirect=f"/orders/{result.order_id}")
    return action_response(result)
