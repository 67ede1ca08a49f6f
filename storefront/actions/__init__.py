"""
Server actions

Entry points for form submissions. Each validates its input, calls one
service, and always answers with an ``ActionResult``; no exception escapes.
"""
from storefront.actions.auth import login_action, logout_action, register_action
from storefront.actions.cart import add_to_cart_action, remove_from_cart_action, update_cart_item_action
from storefront.actions.checkout import checkout_action

__all__ = [
    "add_to_cart_action",
    "checkout_action",
    "login_action",
    "logout_action",
    "register_action",
    "remove_from_cart_action",
    "update_cart_item_action",
]
