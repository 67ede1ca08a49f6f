"""
Base repository

Typed pass-through over one document store collection. Documents are
validated into the collection's pydantic schema on the way out; nothing is
cached.
"""
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel

from storefront.core.exceptions import NotFoundError
from storefront.db.store import DocumentStore, PaginatedDocs, Where

T = TypeVar("T", bound=BaseModel)


class BaseRepository(Generic[T]):
    collection: str
    schema: Type[T]
    default_sort: Optional[str] = None

    def __init__(self, store: DocumentStore):
        self.store = store

    def _to_model(self, doc: Dict[str, Any]) -> T:
        return self.schema.model_validate(doc)

    async def paginate(
        self,
        where: Optional[Where] = None,
        *,
        limit: Optional[int] = None,
        page: int = 1,
        sort: Optional[str] = None,
        depth: int = 1,
    ) -> Tuple[List[T], PaginatedDocs]:
        result = await self.store.find(
            self.collection,
            where,
            limit=limit,
            page=page,
            sort=sort or self.default_sort,
            depth=depth,
        )
        return [self._to_model(doc) for doc in result.docs], result

    async def get_all(self, where: Optional[Where] = None, *, sort: Optional[str] = None, depth: int = 1) -> List[T]:
        docs, _ = await self.paginate(where, sort=sort, depth=depth)
        return docs

    async def get_first(self, where: Optional[Where] = None, *, depth: int = 1) -> Optional[T]:
        docs, _ = await self.paginate(where, limit=1, depth=depth)
        return docs[0] if docs else None

    async def get_first_or_fail(self, where: Optional[Where] = None, *, depth: int = 1) -> T:
        doc = await self.get_first(where, depth=depth)
        if doc is None:
            raise NotFoundError(f"No matching {self.collection} found", collection=self.collection, lookup=where)
        return doc

    async def get_by_slug(self, slug: str, *, depth: int = 1) -> Optional[T]:
        return await self.get_first({"slug": {"equals": slug}}, depth=depth)

    async def get_by_slug_or_fail(self, slug: str, *, depth: int = 1) -> T:
        doc = await self.get_by_slug(slug, depth=depth)
        if doc is None:
            raise NotFoundError(f"No {self.collection} found for '{slug}'", collection=self.collection, lookup=slug)
        return doc

    async def get_by_id(self, id: Any, *, depth: int = 1, lock: bool = False) -> Optional[T]:
        doc = await self.store.find_by_id(self.collection, id, depth=depth, lock=lock)
        return self._to_model(doc) if doc is not None else None

    async def create(self, data: Dict[str, Any], *, depth: int = 1) -> T:
        return self._to_model(await self.store.create(self.collection, data, depth=depth))

    async def update(self, id: Any, data: Dict[str, Any], *, depth: int = 1) -> T:
        return self._to_model(await self.store.update(self.collection, id, data, depth=depth))

    async def delete(self, id: Any) -> Dict[str, Any]:
        return await self.store.delete(self.collection, id)
