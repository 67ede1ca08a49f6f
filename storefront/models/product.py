"""
Product model

Inventory and price are guarded by check constraints so no write, checkout
included, can leave a product with negative stock.
"""
from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, ForeignKey, CheckConstraint

from storefront.core.database import Base
from storefront.core.utils import utcnow
from storefront.models.document import DocumentMixin


class Product(DocumentMixin, Base):
    __tablename__ = "products"
    __collection__ = "products"
    __document_fields__ = ("name", "slug", "description", "price", "category", "inventory")
    __reference_columns__ = {"category": "category_id"}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text)

    price = Column(Numeric(12, 2), nullable=False)
    inventory = Column(Integer, nullable=False, default=0)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="RESTRICT"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint("inventory >= 0", name="check_inventory_non_negative"),
        CheckConstraint("price >= 0", name="check_price_non_negative"),
    )
