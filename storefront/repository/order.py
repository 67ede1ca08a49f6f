from typing import List

from storefront.db.collections import ORDERS
from storefront.repository.base import BaseRepository
from storefront.schemas.order import Order


class OrderRepository(BaseRepository[Order]):
    collection = ORDERS
    schema = Order
    default_sort = "-created_at"

    async def list_for_user(self, user_id: int) -> List[Order]:
        return await self.get_all({"user": {"equals": user_id}})
