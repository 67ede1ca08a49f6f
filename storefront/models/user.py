"""
User model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime

from storefront.core.database import Base
from storefront.core.utils import utcnow
from storefront.models.document import DocumentMixin


class User(DocumentMixin, Base):
    __tablename__ = "users"
    __collection__ = "users"
    __document_fields__ = ("name", "email", "hashed_password", "is_admin")

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    name = Column(String, nullable=False)
    is_admin = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}')>"
