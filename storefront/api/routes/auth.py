"""
Auth routes

Login and registration set the HttpOnly session cookie; the token is never
part of the response body.
"""
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from storefront.actions import login_action, logout_action, register_action
from storefront.api.deps import get_repositories, require_user
from storefront.api.responses import action_response
from storefront.core.config import settings
from storefront.core.cookies import clear_auth_cookie, set_auth_cookie
from storefront.core.rate_limit import limiter
from storefront.repository import Repositories
from storefront.schemas.user import User, UserResponse

router = APIRouter()


@router.post("/login")
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    repos: Repositories = Depends(get_repositories),
):
    result = await login_action(repos, payload)
    response = action_response(result)
    if result.success:
        set_auth_cookie(response, result.token)
    return response


@router.post("/register")
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def register(
    request: Request,
    payload: Dict[str, Any] = Body(...),
    repos: Repositories = Depends(get_repositories),
):
    result = await register_action(repos, payload)
    response = action_response(result, success_status=201)
    if result.success:
        set_auth_cookie(response, result.token)
    return response


@router.post("/logout")
async def logout():
    response = action_response(logout_action(), redirect="/")
    clear_auth_cookie(response)
    return response


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(require_user)):
    return UserResponse.model_validate(user)
