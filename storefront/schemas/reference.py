"""
Reference schema

A relationship field is stored as an id and comes back from the store either
as that id or, when read with enough depth, as the referenced document.
``Reference`` keeps both cases explicit: ``id`` is always there, ``value``
only once resolved.
"""
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, model_validator

from storefront.core.exceptions import UnresolvedReferenceError

T = TypeVar("T")


class Reference(BaseModel, Generic[T]):
    id: int
    value: Optional[T] = None

    @model_validator(mode="before")
    @classmethod
    def from_store_value(cls, data: Any) -> Any:
        if isinstance(data, (int, str)):
            return {"id": data}
        if isinstance(data, dict) and set(data) - {"id", "value"}:
            # An expanded document
            return {"id": data.get("id"), "value": data}
        return data

    @property
    def resolved(self) -> bool:
        return self.value is not None

    def resolve(self) -> T:
        if self.value is None:
            raise UnresolvedReferenceError(
                f"Reference {self.id} was not populated",
                details={"id": self.id},
            )
        return self.value
