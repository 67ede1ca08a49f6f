"""
Document mapping for ORM models

Each model knows its collection, which document fields it stores, and which
of those are references kept in ``*_id`` foreign key columns. The SQL
document store uses this to translate between rows and documents.
"""
from decimal import Decimal
from typing import Any, Dict, Tuple

from sqlalchemy.orm import InstrumentedAttribute

from storefront.core.exceptions import StoreError


def plain(value: Any) -> Any:
    """Numeric columns come back as Decimal; documents carry floats."""
    if isinstance(value, Decimal):
        return float(value)
    return value


class DocumentMixin:
    __collection__: str = ""
    __document_fields__: Tuple[str, ...] = ()
    # document field -> column attribute name
    __reference_columns__: Dict[str, str] = {}

    @classmethod
    def column_for(cls, field: str) -> InstrumentedAttribute:
        name = cls.__reference_columns__.get(field, field)
        if field != "id" and field not in cls.__document_fields__ and field not in ("created_at", "updated_at"):
            raise StoreError(
                f"Cannot filter {cls.__collection__} on '{field}'",
                details={"collection": cls.__collection__, "field": field},
            )
        return getattr(cls, name)

    def to_document(self) -> Dict[str, Any]:
        doc = {"id": self.id}
        for field in self.__document_fields__:
            doc[field] = plain(getattr(self, self.__reference_columns__.get(field, field)))
        doc["created_at"] = self.created_at
        doc["updated_at"] = self.updated_at
        return doc

    def apply_document(self, changes: Dict[str, Any]) -> None:
        for field, value in changes.items():
            if field in self.__document_fields__:
                setattr(self, self.__reference_columns__.get(field, field), value)
