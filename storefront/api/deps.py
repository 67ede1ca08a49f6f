"""
API dependencies

Each request gets a document store (a SQLAlchemy session-backed store, or
the process-wide in-memory store when DOCUMENT_STORE=memory) and the
repositories over it. The session token is read from the Authorization
header first, then from the HttpOnly cookie.
"""
from typing import AsyncIterator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.core.config import settings
from storefront.core.cookies import get_access_token_from_cookie
from storefront.core.database import AsyncSessionLocal
from storefront.core.exceptions import AuthorizationError
from storefront.db.memory import InMemoryDocumentStore
from storefront.db.sql import SQLAlchemyDocumentStore
from storefront.db.store import DocumentStore
from storefront.repository import Repositories
from storefront.schemas.user import User
from storefront.services.auth_service import auth_service

# Optional bearer - doesn't fail if no Authorization header
security = HTTPBearer(auto_error=False)

_memory_store: Optional[InMemoryDocumentStore] = None


def get_memory_store() -> InMemoryDocumentStore:
    global _memory_store
    if _memory_store is None:
        _memory_store = InMemoryDocumentStore()
    return _memory_store


async def get_store() -> AsyncIterator[DocumentStore]:
    if settings.DOCUMENT_STORE == "memory":
        yield get_memory_store()
        return

    async with AsyncSessionLocal() as session:
        yield SQLAlchemyDocumentStore(session)


def get_repositories(store: DocumentStore = Depends(get_store)) -> Repositories:
    return Repositories(store)


def get_token_from_request(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = None,
) -> Optional[str]:
    """
    Extract access token from request.

    Priority:
    1. Authorization header (Bearer token)
    2. HttpOnly cookie
    """
    if credentials and credentials.credentials:
        return credentials.credentials
    return get_access_token_from_cookie(request)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    repos: Repositories = Depends(get_repositories),
) -> Optional[User]:
    """Current user if signed in, None otherwise"""
    token = get_token_from_request(request, credentials)
    return await auth_service.get_current_user(repos, token)


async def require_user(user: Optional[User] = Depends(get_current_user)) -> User:
    if user is None:
        raise AuthorizationError("Not authenticated")
    return user


async def require_admin(user: User = Depends(require_user)) -> User:
    """Require admin user"""
    if not user.is_admin:
        raise AuthorizationError("Admin access required", code="FORBIDDEN")
    return user
