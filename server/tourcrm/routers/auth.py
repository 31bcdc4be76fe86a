"""Authentication and user management router."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import Pagination, RequiredAuth, require_roles
from ..core.exceptions import AuthorizationError
from ..models.enums import UserRole
from ..schemas.auth import CreateUserRequest, CurrentUser, LoginRequest, TokenResponse, UpdateUserRequest, User
from ..schemas.common import PaginatedResponse, PaginationParams
from ..services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["auth"])

DB_DEPENDENCY = Depends(get_db)
ADMINS = Depends(require_roles(UserRole.ADMIN))


def _check_role_grant(current_user: CurrentUser, role) -> None:
    if role == UserRole.OWNER and current_user.role != UserRole.OWNER:
        raise AuthorizationError(detail="Only an OWNER can grant the OWNER role")


@router.post("/auth/login", response_model=TokenResponse)
async def login(request: LoginRequest, db: AsyncSession = DB_DEPENDENCY) -> TokenResponse:
    """Exchange email and password for a bearer token."""
    return await UserService(db).authenticate(request.email, request.password)


@router.get("/auth/me", response_model=User)
async def me(current_user: CurrentUser = RequiredAuth, db: AsyncSession = DB_DEPENDENCY) -> User:
    user = await UserService(db).get_user_by_id_or_raise(current_user.tenant_uuid, current_user.user_uuid)
    return User.model_validate(user)


@router.get("/users", response_model=PaginatedResponse[User])
async def list_users(
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = ADMINS,
    db: AsyncSession = DB_DEPENDENCY,
):
    users, total = await UserService(db).list_users(current_user.tenant_uuid, pagination)
    return PaginatedResponse[User].build([User.model_validate(u) for u in users], total, pagination)


@router.post("/users", response_model=User, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: CreateUserRequest,
    current_user: CurrentUser = ADMINS,
    db: AsyncSession = DB_DEPENDENCY,
) -> User:
    """Create a staff account in the caller's tenant."""
    _check_role_grant(current_user, request.role)
    user = await UserService(db).create_user(current_user.tenant_uuid, request)
    logger.info(
        "User created via API",
        extra={"tenant_id": current_user.tenant_id, "user_id": str(user.id), "by": current_user.user_id}
    )
    return User.model_validate(user)


@router.patch("/users/{user_id}", response_model=User)
async def update_user(
    user_id: UUID,
    request: UpdateUserRequest,
    current_user: CurrentUser = ADMINS,
    db: AsyncSession = DB_DEPENDENCY,
) -> User:
    _check_role_grant(current_user, request.role)
    user = await UserService(db).update_user(current_user.tenant_uuid, user_id, request)
    return User.model_validate(user)
