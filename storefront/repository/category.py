from storefront.db.collections import CATEGORIES
from storefront.repository.base import BaseRepository
from storefront.schemas.product import Category


class CategoryRepository(BaseRepository[Category]):
    collection = CATEGORIES
    schema = Category
    default_sort = "name"
