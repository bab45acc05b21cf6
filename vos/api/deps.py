"""
Shared API dependencies: session authentication, role checks, dispatcher
"""
from typing import Optional
from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from vos.core.database import get_db
from vos.core.errors import AuthenticationError, UnauthorizedError
from vos.models.enums import UserRole
from vos.models.user import User
from vos.services.side_effects import SideEffectDispatcher
from vos.services.users import get_user_by_session_token

_dispatcher: Optional[SideEffectDispatcher] = None


def get_dispatcher() -> SideEffectDispatcher:
    """Process-wide dispatcher; tests override this dependency."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = SideEffectDispatcher()
    return _dispatcher


async def get_current_user(
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Resolve the staff user from an ``Authorization: Bearer <token>`` header.

    Raises:
        AuthenticationError: If the header is missing or the token is unknown
    """
    if not authorization:
        raise AuthenticationError("Authentication required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Authentication required")

    user = await get_user_by_session_token(db, token.strip())
    if not user:
        raise AuthenticationError("Invalid session token")
    return user


def require_roles(*roles: UserRole):
    """Dependency factory restricting a route to the given roles."""

    async def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise UnauthorizedError(
                f"Role {user.role.value} is not allowed to perform this action"
            )
        return user

    return checker


def dispatch_message(report) -> Optional[str]:
    """Human-readable note on failed side effects, or None when all went out."""
    failed = [outcome.name for outcome in report.failures]
    if not failed:
        return None
    return f"Saved; some follow-up actions failed: {', '.join(failed)}"
