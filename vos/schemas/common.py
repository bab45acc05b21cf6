"""
Shared Pydantic building blocks: camelCase base model, response envelope,
embedded contact value object
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts snake_case or camelCase input, serializes as camelCase"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(BaseModel, Generic[T]):
    """Envelope returned by every endpoint: {success, data?, error?}"""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


class ContactInfo(CamelModel):
    """
    Inspector/estimator contact details embedded in an Inspection or Quote.

    This is a value object, not a reference to a User; the optional identity
    link is resolved separately by email (see services.users.resolve_user_id).
    """
    first_name: Optional[str] = Field(None, max_length=100)
    last_name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=40)

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    def to_record(self) -> dict:
        """Dict stored on the owning record (camelCase keys)"""
        return self.model_dump(mode="json", by_alias=True)
