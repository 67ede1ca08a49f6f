"""
Cookie Management Utilities

The session token lives in an HttpOnly cookie so browser clients never
handle it directly; API clients may send it as a Bearer header instead.
"""
from typing import Optional
from fastapi import Response
from starlette.requests import Request

from storefront.core.config import settings

ACCESS_TOKEN_COOKIE = "storefront_token"


def set_auth_cookie(response: Response, access_token: str) -> None:
    """Set the HttpOnly session cookie."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    """Delete the session cookie (logout)."""
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        path="/",
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def get_access_token_from_cookie(request: Request) -> Optional[str]:
    return request.cookies.get(ACCESS_TOKEN_COOKIE)
