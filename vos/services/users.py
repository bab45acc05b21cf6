"""Staff user management."""

import logging
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vos.core.config import settings
from vos.core.errors import ConflictError, NotFoundError, ValidationFailedError
from vos.models.enums import UserRole
from vos.models.user import User
from vos.schemas.user import UserCreate, UserUpdate

logger = logging.getLogger(__name__)


async def create_user(db: AsyncSession, data: UserCreate) -> User:
    """Create a staff user; the email must be unused.

    Raises:
        ConflictError: If a user with this email already exists
    """
    email = data.email.lower()
    result = await db.execute(select(User).where(func.lower(User.email) == email))
    if result.scalar_one_or_none():
        raise ConflictError(f"User with email {email} already exists")

    user = User(
        email=email,
        first_name=data.first_name,
        last_name=data.last_name,
        role=data.role,
        location=data.location,
    )
    db.add(user)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"User with email {email} already exists")

    logger.info("Created %s user %s", user.role.value, user.id)
    return user


async def list_users(db: AsyncSession, role: Optional[UserRole] = None) -> List[User]:
    query = select(User).order_by(User.created_at)
    if role is not None:
        query = query.where(User.role == role)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_user(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if not user:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


async def update_user(db: AsyncSession, user_id: str, data: UserUpdate, acting_user: User) -> User:
    """
    Replace a user's profile fields.

    Raises:
        NotFoundError: If the user does not exist
        ConflictError: If another user already has the email
        ValidationFailedError: If an admin tries to drop their own admin role
    """
    user = await get_user(db, user_id)
    email = data.email.lower()
    result = await db.execute(
        select(User.id).where(func.lower(User.email) == email, User.id != user.id)
    )
    if result.scalars().first():
        raise ConflictError("Email is already taken by another user")
    if user.id == acting_user.id and data.role != UserRole.ADMIN:
        raise ValidationFailedError("Cannot change your own role from admin")

    user.email = email
    user.first_name = data.first_name
    user.last_name = data.last_name
    user.role = data.role
    user.location = data.location
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email is already taken by another user")

    logger.info("Updated user %s", user.id)
    return user


async def delete_user(db: AsyncSession, user_id: str, acting_user: User) -> None:
    """
    Delete a staff user. Cases keep their embedded contact copies.

    Raises:
        NotFoundError: If the user does not exist
        ValidationFailedError: If an admin tries to delete their own account
    """
    user = await get_user(db, user_id)
    if user.id == acting_user.id:
        raise ValidationFailedError("Cannot delete your own account")
    await db.delete(user)
    await db.commit()
    logger.info("Deleted user %s", user_id)


async def get_user_by_session_token(db: AsyncSession, token: str) -> Optional[User]:
    result = await db.execute(select(User).where(User.session_token == token))
    return result.scalar_one_or_none()


async def resolve_user_id(db: AsyncSession, email: Optional[str]) -> Optional[str]:
    """Best-effort link from an embedded contact to a User, by email."""
    if not email:
        return None
    result = await db.execute(select(User.id).where(func.lower(User.email) == email.lower()))
    return result.scalars().first()


async def admin_recipients(db: AsyncSession) -> List[str]:
    """Emails for admin broadcasts: admin users plus configured addresses."""
    result = await db.execute(select(User.email).where(User.role == UserRole.ADMIN))
    recipients = list(result.scalars().all())
    for email in settings.ADMIN_EMAILS:
        if email not in recipients:
            recipients.append(email)
    return recipients
