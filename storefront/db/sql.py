"""
SQLAlchemy document store

Maps the collection interface onto the ORM models. One store wraps one
AsyncSession (one per request). Outside ``transaction()`` every write
commits on its own; inside, writes are flushed and committed together when
the block exits, or rolled back when it raises.

``lock=True`` reads use SELECT ... FOR UPDATE where the backend supports it.
SQLite ignores the clause and does not start a transaction until the first
write, so two sessions can read the same stock. ``decrement`` therefore
subtracts against the stored value under a guard instead of writing back a
number computed from an earlier read.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, List, Optional

from sqlalchemy import and_, func, or_, select, true, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.core.exceptions import DuplicateValueError, NotFoundError, StoreError
from storefront.db.collections import get_collection, prepare_document, validate_document
from storefront.db.relations import populate
from storefront.db.store import (
    Document,
    DocumentStore,
    PaginatedDocs,
    Where,
    iter_conditions,
    parse_sort,
    validate_where,
)
from storefront.models import MODELS_BY_COLLECTION

logger = logging.getLogger(__name__)


def _condition(column, operator: str, value: Any):
    if operator == "equals":
        return column.is_(None) if value is None else column == value
    if operator == "not_equals":
        return column.isnot(None) if value is None else column != value
    if operator == "in":
        return column.in_(list(value or []))
    if operator == "not_in":
        return column.not_in(list(value or []))
    if operator == "greater_than":
        return column > value
    if operator == "greater_than_equal":
        return column >= value
    if operator == "less_than":
        return column < value
    if operator == "less_than_equal":
        return column <= value
    if operator == "like":
        return column.ilike(f"%{value}%")
    if operator == "exists":
        return column.isnot(None) if value else column.is_(None)
    raise StoreError(f"Unsupported filter operator '{operator}'")


class SQLAlchemyDocumentStore(DocumentStore):

    def __init__(self, session: AsyncSession):
        self.session = session
        self._in_transaction = False

    def _model(self, collection: str):
        get_collection(collection)
        return MODELS_BY_COLLECTION[collection]

    def _where_clause(self, model, where: Optional[Where]):
        clauses = [
            _condition(model.column_for(field), operator, value)
            for field, operator, value in iter_conditions(where)
        ]
        if where and where.get("and"):
            clauses.append(and_(*[self._where_clause(model, sub) for sub in where["and"]]))
        if where and where.get("or"):
            clauses.append(or_(*[self._where_clause(model, sub) for sub in where["or"]]))
        return and_(true(), *clauses)

    async def _get(self, model, id: Any, lock: bool = False):
        stmt = (
            select(model)
            .where(model.id == id)
            .execution_options(populate_existing=True)
        )
        if lock:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

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
        model = self._model(collection)
        validate_where(where)
        clause = self._where_clause(model, where)

        total = await self.session.scalar(select(func.count()).select_from(model).where(clause))

        stmt = select(model).where(clause).execution_options(populate_existing=True)
        ordering = parse_sort(sort)
        if ordering:
            field, descending = ordering
            column = model.column_for(field)
            stmt = stmt.order_by(column.desc() if descending else column.asc(), model.id.asc())
        else:
            stmt = stmt.order_by(model.id.asc())

        if limit:
            stmt = stmt.limit(limit).offset((max(page, 1) - 1) * limit)
        if lock:
            stmt = stmt.with_for_update()

        result = await self.session.execute(stmt)
        docs: List[Document] = [row.to_document() for row in result.scalars().all()]
        docs = await populate(self, collection, docs, depth)
        return PaginatedDocs(docs=docs, total_docs=total or 0, limit=limit, page=page)

    async def _check_unique(self, collection: str, doc: Document, exclude_id: Any = None) -> None:
        model = self._model(collection)
        for field in get_collection(collection).unique:
            value = doc.get(field)
            if value is None:
                continue
            stmt = select(model.id).where(model.column_for(field) == value)
            if exclude_id is not None:
                stmt = stmt.where(model.id != exclude_id)
            if await self.session.scalar(stmt.limit(1)) is not None:
                raise DuplicateValueError(collection, field, value)

    async def _flush(self, collection: str) -> None:
        try:
            if self._in_transaction:
                await self.session.flush()
            else:
                await self.session.commit()
        except IntegrityError as e:
            if not self._in_transaction:
                await self.session.rollback()
            logger.warning(f"Integrity error writing {collection}: {e.orig}")
            raise StoreError(
                f"Write to {collection} violates a database constraint",
                details={"collection": collection},
            ) from e

    async def create(self, collection: str, data: Document, *, depth: int = 1) -> Document:
        config = get_collection(collection)
        model = self._model(collection)

        doc = prepare_document(config, data)
        validate_document(config, doc)
        await self._check_unique(collection, doc)

        obj = model()
        obj.apply_document(doc)
        self.session.add(obj)
        await self._flush(collection)

        logger.debug(f"Created {collection} id={obj.id}")
        return await self.find_by_id(collection, obj.id, depth=depth)

    async def update(self, collection: str, id: Any, data: Document, *, depth: int = 1) -> Document:
        config = get_collection(collection)
        model = self._model(collection)

        obj = await self._get(model, id)
        if obj is None:
            raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)

        existing = obj.to_document()
        changes = prepare_document(config, data, existing=existing)
        merged = {**existing, **changes}
        validate_document(config, merged)
        await self._check_unique(collection, merged, exclude_id=id)

        obj.apply_document(changes)
        await self._flush(collection)

        return await self.find_by_id(collection, id, depth=depth)

    async def delete(self, collection: str, id: Any) -> Document:
        model = self._model(collection)

        obj = await self._get(model, id)
        if obj is None:
            raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)

        doc = obj.to_document()
        await self.session.delete(obj)
        await self._flush(collection)

        logger.debug(f"Deleted {collection} id={id}")
        return doc

    async def decrement(
        self, collection: str, id: Any, field: str, amount: int, *, depth: int = 0
    ) -> Optional[Document]:
        model = self._model(collection)
        column = model.column_for(field)

        # UPDATE ... SET field = field - :amount WHERE id = :id AND field >= :amount
        stmt = (
            update(model)
            .where(model.id == id, column >= amount)
            .values({column: column - amount})
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount == 0:
            if await self._get(model, id) is None:
                raise NotFoundError(f"{collection} document {id} not found", collection=collection, lookup=id)
            return None

        await self._flush(collection)
        return await self.find_by_id(collection, id, depth=depth)

    @asynccontextmanager
    async def transaction(self):
        if self._in_transaction:
            yield self
            return

        self._in_transaction = True
        try:
            yield self
            await self.session.commit()
        except BaseException:
            await self.session.rollback()
            logger.info("Transaction rolled back")
            raise
        finally:
            self._in_transaction = False
