from typing import List, Optional, Tuple

from storefront.db.collections import PRODUCTS
from storefront.db.store import PaginatedDocs
from storefront.repository.base import BaseRepository
from storefront.schemas.product import Product


class ProductRepository(BaseRepository[Product]):
    collection = PRODUCTS
    schema = Product
    default_sort = "name"

    async def search(
        self,
        *,
        category_id: Optional[int] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        page: int = 1,
    ) -> Tuple[List[Product], PaginatedDocs]:
        """Catalog listing, optionally narrowed to a category and/or a name/description match."""
        where = {}
        if category_id is not None:
            where["category"] = {"equals": category_id}
        if search:
            where["or"] = [
                {"name": {"like": search}},
                {"description": {"like": search}},
            ]
        return await self.paginate(where, limit=limit, page=page)

    async def reserve_inventory(self, product_id: int, quantity: int) -> Optional[Product]:
        """Take ``quantity`` off the stored inventory; None when there is not enough left."""
        doc = await self.store.decrement(self.collection, product_id, "inventory", quantity, depth=0)
        return self._to_model(doc) if doc is not None else None
