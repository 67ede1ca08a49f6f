"""
Cart models

One cart per user (unique user_id). Lines are ordered rows with string ids
that survive a full rewrite of the line list.
"""
from typing import Any, Dict, List

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Index
from sqlalchemy.orm import relationship

from storefront.core.database import Base
from storefront.core.utils import utcnow
from storefront.models.document import DocumentMixin


class Cart(DocumentMixin, Base):
    __tablename__ = "carts"
    __collection__ = "cart"
    __document_fields__ = ("user",)
    __reference_columns__ = {"user": "user_id"}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.position",
        lazy="selectin",
    )

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["products"] = [
            {"id": item.id, "product": item.product_id, "quantity": item.quantity}
            for item in self.items
        ]
        return doc

    def apply_document(self, changes: Dict[str, Any]) -> None:
        super().apply_document(changes)
        if "products" in changes:
            self.items = self._rebuild_items(changes["products"])

    def _rebuild_items(self, lines: List[Dict[str, Any]]) -> List["CartItem"]:
        existing = {item.id: item for item in self.items}
        rows = []
        for position, line in enumerate(lines):
            item = existing.get(line["id"]) or CartItem(id=line["id"])
            item.product_id = line["product"]
            item.quantity = line["quantity"]
            item.position = position
            rows.append(item)
        return rows


class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(String(32), primary_key=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    position = Column(Integer, nullable=False, default=0)

    cart = relationship("Cart", back_populates="items")

    __table_args__ = (
        Index("ix_cart_items_cart_product", "cart_id", "product_id"),
    )
