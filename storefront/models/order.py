"""
Order models

Order lines are a snapshot taken at checkout: the unit price is copied from
the product and never follows later price changes.
"""
from typing import Any, Dict

from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, Index, CheckConstraint
from sqlalchemy.orm import relationship

from storefront.core.database import Base
from storefront.core.utils import utcnow
from storefront.models.document import DocumentMixin, plain


class Order(DocumentMixin, Base):
    __tablename__ = "orders"
    __collection__ = "orders"
    __document_fields__ = ("user", "status", "total")
    __reference_columns__ = {"user": "user_id"}

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    total = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.position",
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint("total >= 0", name="check_order_total_non_negative"),
    )

    def to_document(self) -> Dict[str, Any]:
        doc = super().to_document()
        doc["items"] = [
            {
                "id": item.id,
                "product": item.product_id,
                "quantity": item.quantity,
                "price": plain(item.price),
            }
            for item in self.items
        ]
        return doc

    def apply_document(self, changes: Dict[str, Any]) -> None:
        super().apply_document(changes)
        if "items" in changes:
            existing = {item.id: item for item in self.items}
            rows = []
            for position, line in enumerate(changes["items"]):
                item = existing.get(line["id"]) or OrderItem(id=line["id"])
                item.product_id = line["product"]
                item.quantity = line["quantity"]
                item.price = line["price"]
                item.position = position
                rows.append(item)
            self.items = rows


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(String(32), primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # SET NULL keeps order history when a product is removed
    product_id = Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True, index=True)
    price = Column(Numeric(12, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    position = Column(Integer, nullable=False, default=0)

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        Index("ix_order_items_order_product", "order_id", "product_id"),
    )
