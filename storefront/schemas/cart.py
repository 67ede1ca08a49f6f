"""
Cart schemas
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.core.utils import to_money
from storefront.schemas.product import Product
from storefront.schemas.reference import Reference
from storefront.schemas.user import User


class CartLine(BaseModel):
    id: str
    product: Reference[Product]
    quantity: int


class Cart(BaseModel):
    id: int
    user: Reference[User]
    products: List[CartLine] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def find_line(self, product_id: int) -> Optional[CartLine]:
        for line in self.products:
            if line.product.id == product_id:
                return line
        return None


class CartDetailItem(BaseModel):
    id: str
    quantity: int
    # None when the product no longer exists
    product: Optional[Product] = None

    @property
    def line_total(self) -> Decimal:
        if self.product is None:
            return to_money(0)
        return to_money(self.product.price) * self.quantity


class CartDetail(BaseModel):
    id: int
    total: float
    items: List[CartDetailItem]

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)


class CartItemUpdate(BaseModel):
    quantity: int = Field(..., ge=0)


class CartResponse(BaseModel):
    id: Optional[int] = None
    total: float = 0.0
    items: List[CartDetailItem] = []
    item_count: int = 0
