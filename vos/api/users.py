"""
User API endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from vos.api.deps import get_current_user, require_roles
from vos.core.database import get_db
from vos.models.enums import UserRole
from vos.models.user import User
from vos.schemas.common import ApiResponse
from vos.schemas.user import UserCreate, UserCreatedResponse, UserResponse, UserUpdate
from vos.services import users

router = APIRouter()


@router.get("/me", response_model=ApiResponse[UserResponse])
async def current_user(user: User = Depends(get_current_user)):
    return ApiResponse(data=UserResponse.model_validate(user))


@router.get("", response_model=ApiResponse[List[UserResponse]])
async def list_users(
    role: Optional[UserRole] = Query(None, description="Filter by role"),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """List staff users, optionally by role (e.g. to pick an inspector)."""
    found = await users.list_users(db, role=role)
    return ApiResponse(data=[UserResponse.model_validate(u) for u in found])


@router.post("", response_model=ApiResponse[UserCreatedResponse], status_code=201)
async def create_user(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Create a staff user. The session token is returned only here.

    Raises:
        ConflictError 409: If the email is already registered
        UnauthorizedError 403: If the caller is not an admin
    """
    user = await users.create_user(db, user_data)
    return ApiResponse(data=UserCreatedResponse.model_validate(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    user_data: UserUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Update a staff user's name, email, role and location.

    Raises:
        NotFoundError 404: If the user does not exist
        ConflictError 409: If the email belongs to another user
        ValidationFailedError 400: If an admin removes their own admin role
    """
    user = await users.update_user(db, user_id, user_data, admin)
    return ApiResponse(data=UserResponse.model_validate(user))


@router.delete("/{user_id}", response_model=ApiResponse[None])
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_roles(UserRole.ADMIN)),
):
    await users.delete_user(db, user_id, admin)
    return ApiResponse(message="User deleted")
