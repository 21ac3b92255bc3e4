"""
Self-service profile updates and admin account moderation.
"""

from typing import Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from eventhive.models.enums import UserRole
from eventhive.models.user import User
from eventhive.schemas.user import ProfileUpdate
from eventhive.core.exceptions import NotFoundError, ValidationError
from eventhive.core.logging import get_logger

logger = get_logger(__name__)


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        setattr(user, field, value)

    await db.flush()
    await db.refresh(user)
    logger.info("profile_updated", user_id=user.id, fields=sorted(changes))
    return user


async def set_user_banned(db: AsyncSession, admin: User, user_id: int, banned: bool) -> User:
    if user_id == admin.id:
        raise ValidationError("Admins cannot ban themselves")

    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    user.is_banned = banned
    await db.flush()
    await db.refresh(user)

    logger.info("user_ban_updated", user_id=user.id, banned=banned, admin_id=admin.id)
    return user


async def list_users(
    db: AsyncSession,
    search: Optional[str] = None,
    role: Optional[UserRole] = None,
) -> list[User]:
    """Admin user directory, newest accounts first."""
    query = select(User)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
    if role:
        query = query.where(User.role == role.value)

    result = await db.execute(query.order_by(User.created_at.desc(), User.id.desc()))
    return list(result.scalars().all())
