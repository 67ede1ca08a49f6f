"""
Document store layer

Collections, the store interface and its two implementations.
"""
from storefront.db.memory import InMemoryDocumentStore
from storefront.db.sql import SQLAlchemyDocumentStore
from storefront.db.store import DocumentStore, PaginatedDocs

__all__ = ["DocumentStore", "InMemoryDocumentStore", "PaginatedDocs", "SQLAlchemyDocumentStore"]
