"""
In-memory document store

Backs tests and ``DOCUMENT_STORE=memory`` development runs. Documents are
kept as plain dicts and copied on every read and write so callers never
share state with the store.

Transactions are serialized by one asyncio lock (standalone writes take it
too) and roll back by restoring a snapshot taken when the block starts.
Every call yields to the event loop once, like a network round trip would,
so interleavings between concurrent workflows are real.
"""
import asyncio
import contextvars
import copy
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from storefront.core.exceptions import DuplicateValueError, NotFoundError
from storefront.core.utils import utcnow
from storefront.db.collections import COLLECTIONS, get_collection, prepare_document, validate_document
from storefront.db.relations import populate
from storefront.db.store import (
    Document,
    DocumentStore,
    PaginatedDocs,
    Where,
    compare,
    iter_conditions,
    parse_sort,
    validate_where,
)

logger = logging.getLogger(__name__)


class InMemoryDocumentStore(DocumentStore):

    def __init__(self):
        self._data: Dict[str, Dict[int, Document]] = {slug: {} for slug in COLLECTIONS}
        self._next_ids: Dict[str, int] = {slug: 1 for slug in COLLECTIONS}
        self._lock = asyncio.Lock()
        # Marks the task that currently owns the write lock
        self._owner: contextvars.ContextVar[bool] = contextvars.ContextVar(
            f"memory_store_tx_{id(self)}", default=False
        )

    # ------------------------------------------------------------------ reads

    def _matches(self, doc: Document, where: Optional[Where]) -> bool:
        if not where:
            return True
        for field, operator, value in iter_conditions(where):
            if not compare(operator, doc.get(field), value):
                return False
        for sub in where.get("and", []):
            if not self._matches(doc, sub):
                return False
        if "or" in where and not any(self._matches(doc, sub) for sub in where["or"]):
            return False
        return True

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
        get_collection(collection)
        validate_where(where)
        await asyncio.sleep(0)

        matched = [doc for doc in self._data[collection].values() if self._matches(doc, where)]

        ordering = parse_sort(sort)
        if ordering:
            field, descending = ordering
            present = [d for d in matched if d.get(field) is not None]
            missing = [d for d in matched if d.get(field) is None]
            present.sort(key=lambda d: d[field], reverse=descending)
            matched = present + missing
        else:
            matched.sort(key=lambda d: d["id"])

        total = len(matched)
        if limit:
            start = (max(page, 1) - 1) * limit
            matched = matched[start:start + limit]

        docs = copy.deepcopy(matched)
        docs = await populate(self, collection, docs, depth)
        return PaginatedDocs(docs=docs, total_docs=total, limit=limit, page=page)

    # ----------------------------------------------------------------- writes

    @asynccontextmanager
    async def _write_scope(self):
        if self._owner.get():
            yield
            return
        async with self._lock:
            yield

    def _check_unique(self, collection: str, doc: Document, exclude_id: Any = None) -> None:
        config = get_collection(collection)
        for field in config.unique:
            value = doc.get(field)
            if value is None:
                continue
            for other in self._data[collection].values():
                if other["id"] != exclude_id and other.get(field) == value:
                    raise DuplicateValueError(collection, field, value)

    async def create(self, collection: str, data: Document, *, depth: int = 1) -> Document:
        config = get_collection(collection)
        async with self._write_scope():
            await asyncio.sleep(0)
            doc = prepare_document(config, data)
            validate_document(config, doc)
            self._check_unique(collection, doc)

            now = utcnow()
            doc["id"] = self._next_ids[collection]
            doc["created_at"] = now
            doc["updated_at"] = now
            self._next_ids[collection] += 1
            self._data[collection][doc["id"]] = copy.deepcopy(doc)

        logger.debug(f"Created {collection} id={doc['id']}")
        return await self._read_back(doc, collection, depth)

    async def update(self, collection: str, id: Any, data: Document, *, depth: int = 1) -> Document:
        config = get_collection(collection)
        async with self._write_scope():
            await asyncio.sleep(0)
            existing = self._data[collection].get(id)
            if existing is None:
                raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)

            changes = prepare_document(config, data, existing=existing)
            merged = {**copy.deepcopy(existing), **changes}
            validate_document(config, merged)
            self._check_unique(collection, merged, exclude_id=id)

            merged["id"] = id
            merged["updated_at"] = utcnow()
            self._data[collection][id] = merged

        return await self._read_back(copy.deepcopy(merged), collection, depth)

    async def delete(self, collection: str, id: Any) -> Document:
        get_collection(collection)
        async with self._write_scope():
            await asyncio.sleep(0)
            doc = self._data[collection].pop(id, None)
            if doc is None:
                raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)

        logger.debug(f"Deleted {collection} id={id}")
        return copy.deepcopy(doc)

    async def decrement(
        self, collection: str, id: Any, field: str, amount: int, *, depth: int = 0
    ) -> Optional[Document]:
        get_collection(collection)
        async with self._write_scope():
            await asyncio.sleep(0)
            existing = self._data[collection].get(id)
            if existing is None:
                raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)

            current = existing.get(field) or 0
            if current < amount:
                return None
            existing[field] = current - amount
            existing["updated_at"] = utcnow()
            doc = copy.deepcopy(existing)

        return await self._read_back(doc, collection, depth)

    async def _read_back(self, doc: Document, collection: str, depth: int) -> Document:
        docs: List[Document] = await populate(self, collection, [doc], depth)
        return docs[0]

    @asynccontextmanager
    async def transaction(self):
        if self._owner.get():
            # Nested block joins the outer transaction
            yield self
            return

        async with self._lock:
            snapshot = copy.deepcopy((self._data, self._next_ids))
            token = self._owner.set(True)
            try:
                yield self
            except BaseException:
                self._data, self._next_ids = snapshot
                logger.info("In-memory transaction rolled back")
                raise
            finally:
                self._owner.reset(token)

    # ------------------------------------------------------------------ utils

    def clear(self) -> None:
        """Drop every document (used by seeding with --reset)."""
        for slug in COLLECTIONS:
            self._data[slug].clear()
            self._next_ids[slug] = 1
