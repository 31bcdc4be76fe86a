"""Authentication and user schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..models.enums import UserRole


class CurrentUser(BaseModel):
    """Identity resolved from a bearer token."""

    user_id: str
    tenant_id: str
    role: UserRole
    email: Optional[str] = None

    @property
    def tenant_uuid(self) -> UUID:
        """Tenant id as a UUID for query filters."""
        return UUID(self.tenant_id)

    @property
    def user_uuid(self) -> UUID:
        """User id as a UUID."""
        return UUID(self.user_id)


class LoginRequest(BaseModel):
    """Request schema for logging in."""

    email: str = Field(..., min_length=3, max_length=255, description="User email")
    password: str = Field(..., min_length=1, max_length=128, description="User password")


class TokenResponse(BaseModel):
    """Issued access token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Lifetime in seconds")
    user: "User"


class CreateUserRequest(BaseModel):
    """Request schema for creating a user inside the caller's tenant."""

    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.AGENT


class UpdateUserRequest(BaseModel):
    """Request schema for updating a user."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=8, max_length=128)


class User(BaseModel):
    """User response schema."""

    id: UUID
    tenant_id: UUID
    email: str
    name: str
    role: UserRole
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


TokenResponse.model_rebuild()
