"""
User schemas
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from storefront.schemas.reference import Reference


class User(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool = False
    # Never serialized
    hashed_password: Optional[str] = Field(default=None, exclude=True, repr=False)
    cart: Optional[Reference[Dict[str, Any]]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    is_admin: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
