"""
Auth service

Registration, credential checks and session tokens. Users are documents in
the ``users`` collection; the token carries the user id as ``sub``.
"""
import logging
from typing import Optional

from storefront.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DuplicateEmailError,
    DuplicateValueError,
)
from storefront.core.security import create_access_token, decode_token, get_password_hash, verify_password
from storefront.repository import Repositories
from storefront.schemas.user import User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "An account with this email already exists"


class AuthService:

    @staticmethod
    async def register(repos: Repositories, name: str, email: str, password: str) -> User:
        email = email.strip().lower()
        if await repos.user.get_by_email(email) is not None:
            raise DuplicateEmailError(DUPLICATE_EMAIL_MESSAGE, details={"email": email})

        try:
            user = await repos.user.create(
                {
                    "name": name.strip(),
                    "email": email,
                    "hashed_password": get_password_hash(password),
                },
                depth=0,
            )
        except DuplicateValueError as e:
            # Lost a race with a concurrent registration
            raise DuplicateEmailError(DUPLICATE_EMAIL_MESSAGE, details={"email": email}) from e

        logger.info(f"Registered user {user.id}")
        return user

    @staticmethod
    async def authenticate(repos: Repositories, email: str, password: str) -> User:
        user = await repos.user.get_by_email(email)
        if user is None or not verify_password(password, user.hashed_password or ""):
            logger.warning("Failed login attempt")
            raise AuthenticationError("Invalid credentials")
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token({"sub": user.id, "email": user.email})

    @staticmethod
    async def get_current_user(repos: Repositories, token: Optional[str]) -> Optional[User]:
        """Resolve a session token to its user, or None for missing/invalid tokens."""
        if not token:
            return None

        payload = decode_token(token)
        if not payload:
            return None

        try:
            user_id = int(payload.get("sub"))
        except (TypeError, ValueError):
            return None

        return await repos.user.get_by_id(user_id, depth=0)

    @staticmethod
    def require_auth(user: Optional[User], message: str = "You must be signed in") -> User:
        if user is None:
            raise AuthorizationError(message)
        return user


# Singleton instance
auth_service = AuthService()
