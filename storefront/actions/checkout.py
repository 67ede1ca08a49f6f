from typing import Any, Dict, Optional

from storefront.actions.base import result_from_error
from storefront.core.exceptions import AuthorizationError
from storefront.repository import Repositories
from storefront.schemas.forms import CheckoutForm
from storefront.schemas.results import ActionResult
from storefront.schemas.user import User
from storefront.services.checkout_service import checkout_service


async def checkout_action(repos: Repositories, user: Optional[User], data: Dict[str, Any]) -> ActionResult:
    try:
        if user is None:
            return ActionResult.fail("You must be signed in to checkout", error_code=AuthorizationError.default_code)
        form = CheckoutForm(**data)
        order = await checkout_service.checkout(repos, user, form)
        return ActionResult.ok("Order placed successfully!", order_id=str(order.id))
    except Exception as e:
        return result_from_error(e, "Failed to process checkout. Please try again.")
