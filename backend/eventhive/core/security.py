"""
Password hashing, JWT issuance and current-user resolution.

Tokens are accepted from the Authorization header (Bearer) or from the
HTTP-only session cookie set at sign-in.
"""

from datetime import timedelta
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.core.clock import utcnow
from eventhive.core.config import get_settings
from eventhive.core.exceptions import ForbiddenError, UnauthorizedError
from eventhive.db.session import get_db
from eventhive.models.enums import UserRole
from eventhive.models.user import User

settings = get_settings()

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, hashed: str) -> bool:
    return pwd_context.verify(password, hashed)


def create_access_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    to_encode = data.copy()
    expire = utcnow() + timedelta(
        minutes=expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    if "sub" not in payload:
        raise UnauthorizedError("Invalid token payload")
    return payload


def _extract_token(
    request: Request, credentials: Optional[HTTPAuthorizationCredentials]
) -> Optional[str]:
    if credentials is not None:
        return credentials.credentials
    return request.cookies.get(settings.SESSION_COOKIE_NAME)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    token = _extract_token(request, credentials)
    if not token:
        raise UnauthorizedError()

    payload = decode_access_token(token)
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token payload")

    user = await db.get(User, user_id)
    if user is None:
        raise UnauthorizedError("User no longer exists")
    if not user.is_active or user.is_banned:
        raise ForbiddenError("Account is disabled")
    return user


async def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """Like get_current_user, but anonymous callers resolve to None."""
    if not _extract_token(request, credentials):
        return None
    try:
        return await get_current_user(request, credentials, db)
    except (UnauthorizedError, ForbiddenError):
        return None


async def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    return user.id


async def get_current_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != UserRole.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return user
