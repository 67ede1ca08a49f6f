"""
Password hashing and session tokens

A session token is a signed JWT whose ``sub`` is the user id. Tokens of any
other ``type`` are rejected when decoded.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import JWTError, jwt

from storefront.core.config import settings

SESSION_TOKEN_TYPE = "access"


def get_password_hash(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """False for accounts without a stored hash."""
    if not hashed_password:
        return False
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = dict(claims)
    if "sub" in payload:
        # RFC 7519 requires sub to be a string
        payload["sub"] = str(payload["sub"])
    payload["type"] = SESSION_TOKEN_TYPE
    payload["jti"] = uuid.uuid4().hex
    payload["iat"] = issued_at
    payload["exp"] = issued_at + lifetime
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid session token; None when expired, tampered or foreign."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("type") != SESSION_TOKEN_TYPE:
        return None
    return payload
