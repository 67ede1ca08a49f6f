"""
Auth actions

Login and registration hand back the session token on the result; the
route layer moves it into the cookie and never serializes it.
"""
from typing import Any, Dict, Optional

from pydantic import Field

from storefront.actions.base import result_from_error
from storefront.repository import Repositories
from storefront.schemas.forms import LoginForm, RegisterForm
from storefront.schemas.results import ActionResult
from storefront.services.auth_service import auth_service


class AuthActionResult(ActionResult):
    token: Optional[str] = Field(default=None, exclude=True)


async def login_action(repos: Repositories, data: Dict[str, Any]) -> AuthActionResult:
    try:
        form = LoginForm(**data)
        user = await auth_service.authenticate(repos, form.email, form.password)
        return AuthActionResult.ok("Login successful", token=auth_service.issue_token(user))
    except Exception as e:
        return result_from_error(e, "Login failed. Please try again.", AuthActionResult)


async def register_action(repos: Repositories, data: Dict[str, Any]) -> AuthActionResult:
    try:
        form = RegisterForm(**data)
        user = await auth_service.register(repos, form.name, form.email, form.password)
        # Signed in straight away
        return AuthActionResult.ok("Account created successfully", token=auth_service.issue_token(user))
    except Exception as e:
        return result_from_error(e, "Registration failed. Please try again.", AuthActionResult)


def logout_action() -> ActionResult:
    return ActionResult.ok("Signed out")
