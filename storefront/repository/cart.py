"""
Cart repository

``get_cart_by_user`` flattens the stored cart into the shape the cart page
and checkout work with: resolved products and a running total.
"""
from typing import Optional

from storefront.core.utils import money_to_float, to_money
from storefront.db.collections import CART
from storefront.repository.base import BaseRepository
from storefront.schemas.cart import Cart, CartDetail, CartDetailItem


class CartRepository(BaseRepository[Cart]):
    collection = CART
    schema = Cart

    async def get_by_user(self, user_id: int, *, lock: bool = False) -> Optional[Cart]:
        if lock:
            result = await self.store.find(self.collection, {"user": {"equals": user_id}}, limit=1, lock=True)
            return self._to_model(result.docs[0]) if result.docs else None
        return await self.get_first({"user": {"equals": user_id}})

    async def get_cart_by_user(self, user_id: int) -> Optional[CartDetail]:
        cart = await self.get_by_user(user_id)
        if cart is None:
            return None

        items = [
            CartDetailItem(
                id=line.id,
                quantity=line.quantity,
                product=line.product.value,
            )
            for line in cart.products
        ]
        total = sum((item.line_total for item in items), to_money(0))
        return CartDetail(id=cart.id, total=money_to_float(total), items=items)
