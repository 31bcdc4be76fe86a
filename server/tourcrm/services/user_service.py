"""User management and login."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError
from ..core.security import create_access_token, hash_password, verify_password
from ..models.tenant import Tenant, User
from ..schemas.auth import CreateUserRequest, TokenResponse, UpdateUserRequest
from ..schemas.auth import User as UserSchema
from ..schemas.common import PaginationParams

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class UserService:
    """Service for staff accounts and token issuance."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.strip().lower())
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id(self, tenant_id: UUID, user_id: UUID) -> Optional[User]:
        stmt = select(User).where(User.id == user_id, User.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_user_by_id_or_raise(self, tenant_id: UUID, user_id: UUID) -> User:
        user = await self.get_user_by_id(tenant_id, user_id)
        if user is None:
            raise NotFoundError(resource_type="user", resource_id=str(user_id))
        return user

    async def authenticate(self, email: str, password: str) -> TokenResponse:
        """
        Check credentials and issue an access token.

        Unknown emails, wrong passwords, inactive users and inactive tenants
        all fail with the same message.
        """
        user = await self.get_user_by_email(email)
        if user is None or not user.is_active or not verify_password(password, user.password_hash):
            logger.warning("Login failed", extra={"email": email})
            raise AuthenticationError(INVALID_CREDENTIALS)

        tenant = await self.db.get(Tenant, user.tenant_id)
        if tenant is None or not tenant.is_active:
            logger.warning("Login rejected for inactive tenant", extra={"tenant_id": str(user.tenant_id)})
            raise AuthenticationError(INVALID_CREDENTIALS)

        role = user.role.value if hasattr(user.role, "value") else user.role
        token = create_access_token(
            user_id=str(user.id),
            tenant_id=str(user.tenant_id),
            role=role,
            email=user.email,
        )

        logger.info("User logged in", extra={"user_id": str(user.id), "tenant_id": str(user.tenant_id)})
        return TokenResponse(
            access_token=token,
            expires_in=settings.access_token_expire_minutes * 60,
            user=UserSchema.model_validate(user),
        )

    async def list_users(self, tenant_id: UUID, pagination: PaginationParams) -> tuple[list[User], int]:
        total = await self.db.scalar(
            select(func.count()).select_from(User).where(User.tenant_id == tenant_id)
        )
        stmt = (
            select(User)
            .where(User.tenant_id == tenant_id)
            .order_by(User.created_at)
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def create_user(self, tenant_id: UUID, request: CreateUserRequest) -> User:
        email = request.email.strip().lower()
        if await self.get_user_by_email(email) is not None:
            raise ConflictError(detail=f"User with email {email} already exists", code="USER_EXISTS")

        user = User(
            tenant_id=tenant_id,
            email=email,
            name=request.name,
            password_hash=hash_password(request.password),
            role=request.role,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError(detail=f"User with email {email} already exists", code="USER_EXISTS")

        logger.info("User created", extra={"tenant_id": str(tenant_id), "user_id": str(user.id)})
        return user

    async def update_user(self, tenant_id: UUID, user_id: UUID, request: UpdateUserRequest) -> User:
        user = await self.get_user_by_id_or_raise(tenant_id, user_id)
        data = request.model_dump(exclude_unset=True)
        password = data.pop("password", None)
        if password:
            user.password_hash = hash_password(password)
        for field, value in data.items():
            setattr(user, field, value)

        await self.db.commit()
        return user
