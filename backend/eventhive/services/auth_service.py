"""
Authentication service handling user registration and login.

The signup form's role choice travels as an explicit field of the
registration request; nothing is parked in process memory between calls.
"""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import UserRole
from eventhive.models.user import User
from eventhive.schemas.user import UserCreate, UserLogin
from eventhive.core.exceptions import ConflictError, ForbiddenError, UnauthorizedError, ValidationError
from eventhive.core.security import hash_password, verify_password, create_access_token
from eventhive.core.logging import get_logger

logger = get_logger(__name__)

SELF_SERVICE_ROLES = frozenset({UserRole.PLAYER, UserRole.FACILITY_OWNER})


async def register_user(db: AsyncSession, user_data: UserCreate) -> User:
    """
    Register a new user with hashed password.
    Raises 409 if the email already exists, 400 for a role that cannot be self-assigned.
    """
    if user_data.role not in SELF_SERVICE_ROLES:
        logger.warning("registration_failed", reason="role_not_allowed", role=user_data.role.value)
        raise ValidationError("Role cannot be chosen at signup")

    email = user_data.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.warning("registration_failed", reason="email_exists", email=email)
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        name=user_data.name,
        hashed_password=hash_password(user_data.password),
        role=user_data.role.value,
    )
    db.add(user)
    await db.flush()
    await db.refresh(user)

    logger.info("user_registered", user_id=user.id, role=user.role)
    return user


async def authenticate_user(db: AsyncSession, login_data: UserLogin) -> tuple[User, str]:
    """
    Authenticate user and return it together with a JWT access token.
    Raises 401 if credentials are invalid, 403 if the account is disabled.
    """
    result = await db.execute(select(User).where(User.email == login_data.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not verify_password(login_data.password, user.hashed_password):
        logger.warning("login_failed", email=login_data.email)
        raise UnauthorizedError("Invalid email or password")

    if not user.is_active or user.is_banned:
        raise ForbiddenError("Account is disabled")

    token = create_access_token(data={"sub": str(user.id), "role": user.role})
    logger.info("user_logged_in", user_id=user.id)
    return user, token
