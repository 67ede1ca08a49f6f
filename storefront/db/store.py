"""
Document store interface

Workflows and repositories talk to persistence only through this narrow
async interface: find / create / update / delete over named collections with
a ``where`` filter, plus a transaction scope. ``InMemoryDocumentStore`` and
``SQLAlchemyDocumentStore`` implement it.

Filter language::

    {"user": {"equals": 3}}
    {"price": {"greater_than_equal": 10}, "category": {"in": [1, 2]}}
    {"or": [{"slug": {"equals": "a"}}, {"slug": {"equals": "b"}}]}
"""
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Dict, List, Optional, Tuple

from storefront.core.exceptions import StoreError

Where = Dict[str, Any]
Document = Dict[str, Any]

OPERATORS = (
    "equals",
    "not_equals",
    "in",
    "not_in",
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
    "like",
    "exists",
)

LOGICAL_KEYS = ("and", "or")


@dataclass
class PaginatedDocs:
    docs: List[Document] = field(default_factory=list)
    total_docs: int = 0
    limit: Optional[int] = None
    page: int = 1

    @property
    def total_pages(self) -> int:
        if not self.limit:
            return 1 if self.total_docs else 0
        return math.ceil(self.total_docs / self.limit)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


def iter_conditions(where: Optional[Where]) -> List[Tuple[str, str, Any]]:
    """
    Flatten the field conditions of one filter level into
    ``(field, operator, value)`` triples, validating operator names.
    Logical keys are skipped; callers recurse into them.
    """
    conditions = []
    for key, condition in (where or {}).items():
        if key in LOGICAL_KEYS:
            if not isinstance(condition, list):
                raise StoreError(f"'{key}' expects a list of filters")
            continue
        if not isinstance(condition, dict):
            # Shorthand: {"field": value} means equals
            conditions.append((key, "equals", condition))
            continue
        for operator, value in condition.items():
            if operator not in OPERATORS:
                raise StoreError(f"Unsupported filter operator '{operator}'", details={"field": key})
            conditions.append((key, operator, value))
    return conditions


def validate_where(where: Optional[Where]) -> None:
    """Check every operator in a filter tree, including untaken ``and``/``or`` branches."""
    iter_conditions(where)
    for key in LOGICAL_KEYS:
        for sub in (where or {}).get(key) or []:
            validate_where(sub)


def parse_sort(sort: Optional[str]) -> Optional[Tuple[str, bool]]:
    """Return ``(field, descending)`` for ``"field"`` / ``"-field"``."""
    if not sort:
        return None
    if sort.startswith("-"):
        return sort[1:], True
    return sort, False


def compare(operator: str, actual: Any, expected: Any) -> bool:
    """Evaluate one filter operator against a document value."""
    if operator == "equals":
        return actual == expected
    if operator == "not_equals":
        return actual != expected
    if operator == "in":
        return actual in (expected or [])
    if operator == "not_in":
        return actual not in (expected or [])
    if operator == "exists":
        return (actual is not None) == bool(expected)
    if operator == "like":
        if actual is None or expected is None:
            return False
        return str(expected).lower() in str(actual).lower()
    if actual is None:
        return False
    if operator == "greater_than":
        return actual > expected
    if operator == "greater_than_equal":
        return actual >= expected
    if operator == "less_than":
        return actual < expected
    if operator == "less_than_equal":
        return actual <= expected
    raise StoreError(f"Unsupported filter operator '{operator}'")


class DocumentStore(ABC):
    """Async CRUD over named collections."""

    @abstractmethod
    async def find(
        self,
        collection: str,
        where: Optional[Where] = None,
        *,
        limit: Optional[int] = None,
        page: int = 1,
        sort: Optional[str] = None,
        depth: int = 1,
        lock: bool = False,
    ) -> PaginatedDocs:
        ...

    async def find_by_id(self, collection: str, id: Any, *, depth: int = 1, lock: bool = False) -> Optional[Document]:
        result = await self.find(collection, {"id": {"equals": id}}, limit=1, depth=depth, lock=lock)
        return result.docs[0] if result.docs else None

    @abstractmethod
    async def create(self, collection: str, data: Document, *, depth: int = 1) -> Document:
        ...

    @abstractmethod
    async def update(self, collection: str, id: Any, data: Document, *, depth: int = 1) -> Document:
        ...

    @abstractmethod
    async def delete(self, collection: str, id: Any) -> Document:
        ...

    @abstractmethod
    async def decrement(
        self, collection: str, id: Any, field: str, amount: int, *, depth: int = 0
    ) -> Optional[Document]:
        """
        Subtract ``amount`` from a numeric field against its stored value,
        in one step and only while that value still covers it.

        Returns the updated document, or None when the stored value is
        smaller than ``amount`` (nothing is written). Raises NotFoundError
        if the document is gone.
        """
        ...

    @abstractmethod
    def transaction(self) -> AsyncContextManager["DocumentStore"]:
        """All writes inside the block commit together or not at all."""
        ...

    async def count(self, collection: str, where: Optional[Where] = None) -> int:
        result = await self.find(collection, where, depth=0)
        return result.total_docs
