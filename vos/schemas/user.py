"""
User Pydantic schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import EmailStr, Field
from vos.models.enums import UserRole
from vos.schemas.common import CamelModel


class UserCreate(CamelModel):
    """Schema for creating a staff user"""
    email: EmailStr = Field(..., description="Unique login email")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.AGENT
    location: Optional[str] = None


class UserUpdate(CamelModel):
    """Schema for an admin editing a staff user; every field but location is required"""
    email: EmailStr
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole
    location: Optional[str] = None


class UserResponse(CamelModel):
    """Schema for user response"""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    location: Optional[str] = None
    created_at: datetime


class UserCreatedResponse(UserResponse):
    """Returned once, at creation: carries the session token"""
    session_token: str
