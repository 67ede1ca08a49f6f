"""
Order schemas
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from storefront.schemas.product import Product
from storefront.schemas.reference import Reference
from storefront.schemas.user import User


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class OrderLine(BaseModel):
    id: str
    # Null once the product has been deleted
    product: Optional[Reference[Product]] = None
    quantity: int
    price: float


class Order(BaseModel):
    id: int
    user: Optional[Reference[User]] = None
    status: OrderStatus = OrderStatus.PENDING
    items: List[OrderLine] = []
    total: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderList(BaseModel):
    orders: List[Order]
    total: int
