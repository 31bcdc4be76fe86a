"""Client router: CRUD, search, bulk import and activity timeline."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.dependencies import ALL_STAFF, SALES, Pagination, require_roles
from ..core.exceptions import InternalServerError, ProblemDetailsException
from ..schemas.auth import CurrentUser
from ..schemas.client import (
    BulkImportRequest,
    BulkImportResult,
    Client,
    CreateClientRequest,
    UpdateClientRequest,
)
from ..schemas.common import MessageResponse, PaginatedResponse, PaginationParams
from ..schemas.timeline import ClientTimeline
from ..services.client_service import ClientService
from ..services.timeline_service import TimelineService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/clients", tags=["clients"])

DB_DEPENDENCY = Depends(get_db)
STAFF = Depends(require_roles(*ALL_STAFF))
EDITORS = Depends(require_roles(*SALES))


@router.get("", response_model=PaginatedResponse[Client])
async def list_clients(
    search: Optional[str] = Query(None, max_length=100),
    include_inactive: bool = Query(False),
    pagination: PaginationParams = Pagination,
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    clients, total = await ClientService(db).list_clients(
        current_user.tenant_uuid, pagination, search=search, include_inactive=include_inactive
    )
    return PaginatedResponse[Client].build([Client.model_validate(c) for c in clients], total, pagination)


@router.get("/search", response_model=List[Client])
async def search_clients(
    q: str = Query(..., min_length=1, max_length=100),
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Quick lookup across name, email, phone and passport number."""
    clients = await ClientService(db).search(current_user.tenant_uuid, q)
    return [Client.model_validate(c) for c in clients]


@router.get("/{client_id}", response_model=Client)
async def get_client(client_id: UUID, current_user: CurrentUser = STAFF, db: AsyncSession = DB_DEPENDENCY):
    client = await ClientService(db).get_client_by_id_or_raise(current_user.tenant_uuid, client_id)
    return Client.model_validate(client)


@router.get("/{client_id}/timeline", response_model=ClientTimeline)
async def client_timeline(
    client_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Newest entries to return; all when omitted"),
    current_user: CurrentUser = STAFF,
    db: AsyncSession = DB_DEPENDENCY,
):
    """Leads, quotations, bookings, payments and audit entries of a client, newest first."""
    return await TimelineService(db).get_client_timeline(current_user.tenant_uuid, client_id, limit=limit)


@router.post("", response_model=Client, status_code=status.HTTP_201_CREATED)
async def create_client(
    request: CreateClientRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    try:
        client = await ClientService(db).create_client(current_user.tenant_uuid, request)
        return Client.model_validate(client)

    except ProblemDetailsException:
        raise

    except Exception as e:
        error = InternalServerError()
        logger.error(
            "Unexpected error in client creation",
            extra={"tenant_id": current_user.tenant_id, "error": str(e), "error_id": error.problem_details["error_id"]},
            exc_info=True
        )
        raise error from e


@router.post("/bulk-import", response_model=BulkImportResult)
async def bulk_import_clients(
    request: BulkImportRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
) -> BulkImportResult:
    """
    Import up to 1000 clients.

    Use ``dry_run`` to validate a file before writing and ``atomic`` to make
    the import all-or-nothing.
    """
    return await ClientService(db).bulk_import(current_user.tenant_uuid, request)


@router.patch("/{client_id}", response_model=Client)
async def update_client(
    client_id: UUID,
    request: UpdateClientRequest,
    current_user: CurrentUser = EDITORS,
    db: AsyncSession = DB_DEPENDENCY,
):
    client = await ClientService(db).update_client(
        current_user.tenant_uuid, client_id, request, user_id=current_user.user_uuid
    )
    return Client.model_validate(client)


@router.delete("/{client_id}", response_model=MessageResponse)
async def remove_client(client_id: UUID, current_user: CurrentUser = EDITORS, db: AsyncSession = DB_DEPENDENCY):
    await ClientService(db).remove_client(current_user.tenant_uuid, client_id, user_id=current_user.user_uuid)
    return MessageResponse(message="Client deactivated")
