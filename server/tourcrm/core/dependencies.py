"""FastAPI dependencies for authentication, RBAC, pagination and idempotency."""

import logging
from typing import Callable, Optional

from fastapi import Depends, Header, Query
import jwt
from jwt import PyJWTError

from ..models.enums import UserRole
from ..schemas.auth import CurrentUser
from ..schemas.common import PaginationParams
from .exceptions import AuthenticationError, AuthorizationError, ConflictError
from .security import decode_access_token

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> CurrentUser:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        CurrentUser: Identity, tenant and role taken from the token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError("Authorization header missing")

    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        payload = decode_access_token(token)
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except PyJWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")

    user_id = payload.get("sub")
    tenant_id = payload.get("tenant_id")
    role = payload.get("role")
    if not user_id or not tenant_id or not role:
        raise AuthenticationError("Invalid token payload")

    try:
        role = UserRole(role)
    except ValueError:
        raise AuthenticationError(f"Unknown role '{role}' in token")

    return CurrentUser(
        user_id=user_id,
        tenant_id=tenant_id,
        role=role,
        email=payload.get("email"),
    )


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that admits only users holding one of ``roles``.

    OWNER is always admitted.
    """
    allowed = set(roles) | {UserRole.OWNER}

    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            logger.warning(
                "Role check failed",
                extra={
                    "user_id": current_user.user_id,
                    "tenant_id": current_user.tenant_id,
                    "role": current_user.role.value,
                    "required": sorted(r.value for r in allowed),
                }
            )
            raise AuthorizationError(
                detail=f"Role {current_user.role.value} is not allowed to perform this action",
                required_permissions=sorted(r.value for r in allowed),
            )
        return current_user

    return _checker


async def get_pagination(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    limit: int = Query(50, ge=1, le=100, description="Page size"),
) -> PaginationParams:
    """Standard page/limit query parameters."""
    return PaginationParams(page=page, limit=limit)


async def require_idempotency_key(
    idempotency_key: Optional[str] = Header(None, alias=IDEMPOTENCY_KEY_HEADER)
) -> str:
    """
    Extract the idempotency key on guarded endpoints.

    Raises:
        ConflictError: If the header is missing or longer than 255 characters
    """
    if not idempotency_key:
        raise ConflictError(
            detail=f"{IDEMPOTENCY_KEY_HEADER} header is required for this endpoint",
            code="IDEMPOTENCY_KEY_REQUIRED",
        )
    if len(idempotency_key) > 255:
        raise ConflictError(
            detail="Idempotency key must be between 1 and 255 characters",
            code="IDEMPOTENCY_KEY_INVALID",
        )
    return idempotency_key


# Role groups used across routers
ALL_STAFF = (
    UserRole.ADMIN,
    UserRole.AGENT,
    UserRole.OPERATIONS,
    UserRole.ACCOUNTING,
)
SALES = (UserRole.ADMIN, UserRole.AGENT)
FINANCE = (UserRole.ADMIN, UserRole.ACCOUNTING)
CATALOG_EDITORS = (UserRole.ADMIN, UserRole.OPERATIONS)

RequiredAuth = Depends(get_current_user)
Pagination = Depends(get_pagination)
IdempotencyKey = Depends(require_idempotency_key)
