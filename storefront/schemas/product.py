"""
Catalog schemas
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.reference import Reference


class CategoryBase(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Product(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: float
    category: Reference[CategoryBase]
    inventory: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def in_stock(self) -> bool:
        return self.inventory > 0


class Category(CategoryBase):
    products: List[Reference[Product]] = []


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    price: float = Field(..., ge=0)
    category: int = Field(..., ge=1)
    inventory: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    category: Optional[int] = Field(None, ge=1)
    inventory: Optional[int] = Field(None, ge=0)


class ProductList(BaseModel):
    products: List[Product]
    total: int
    page: int
    total_pages: int
