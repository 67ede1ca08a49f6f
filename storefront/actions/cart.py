from typing import Any, Dict, Optional

from storefront.actions.base import result_from_error
from storefront.core.config import settings
from storefront.core.exceptions import AuthorizationError, ValidationError
from storefront.repository import Repositories
from storefront.schemas.forms import AddToCartForm
from storefront.schemas.results import ActionResult
from storefront.schemas.user import User
from storefront.services.cart_service import cart_service


async def add_to_cart_action(repos: Repositories, user: Optional[User], data: Dict[str, Any]) -> ActionResult:
    try:
        if user is None:
            # Checked before the form so anonymous users get the sign-in message
            return ActionResult.fail("You must be signed in to add items to cart", error_code=AuthorizationError.default_code)
        form = AddToCartForm(**data)
        product = await cart_service.add_item(repos, user, form.product_id, form.quantity)
        return ActionResult.ok(f"Updated cart: {product.name}")
    except Exception as e:
        return result_from_error(e, "Failed to add item to cart. Please try again.")


async def remove_from_cart_action(repos: Repositories, user: Optional[User], cart_item_id: str) -> ActionResult:
    try:
        await cart_service.remove_item(repos, user, cart_item_id)
        return ActionResult.ok("Item removed from cart")
    except Exception as e:
        return result_from_error(e, "Failed to remove item from cart. Please try again.")


async def update_cart_item_action(
    repos: Repositories,
    user: Optional[User],
    cart_item_id: str,
    quantity: int,
) -> ActionResult:
    try:
        if quantity > settings.MAX_CART_LINE_QUANTITY:
            message = f"Quantity cannot exceed {settings.MAX_CART_LINE_QUANTITY}"
            raise ValidationError(message, field_errors={"quantity": [message]})
        await cart_service.update_item(repos, user, cart_item_id, quantity)
        return ActionResult.ok("Cart updated" if quantity > 0 else "Item removed from cart")
    except Exception as e:
        return result_from_error(e, "Failed to update cart. Please try again.")
