"""
Category model
"""
from sqlalchemy import Column, Integer, String, Text, DateTime

from storefront.core.database import Base
from storefront.core.utils import utcnow
from storefront.models.document import DocumentMixin


class Category(DocumentMixin, Base):
    __tablename__ = "categories"
    __collection__ = "categories"
    __document_fields__ = ("name", "slug", "description")

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
