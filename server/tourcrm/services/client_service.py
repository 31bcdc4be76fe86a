"""Client service for business logic operations."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.exceptions import ConflictError, NotFoundError
from ..models.client import Client
from ..schemas.client import (
    BulkImportError,
    BulkImportRequest,
    BulkImportResult,
    CreateClientRequest,
    UpdateClientRequest,
)
from ..schemas.common import PaginationParams
from .audit_service import AuditService

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 20


class DuplicateClientEmailError(ConflictError):
    """Exception when a client email is already used inside the tenant."""

    def __init__(self, email: str, existing_id: Optional[UUID] = None):
        super().__init__(
            detail=f"Client with email {email} already exists",
            conflicting_resource={"id": str(existing_id)} if existing_id else None,
            code="CLIENT_EMAIL_EXISTS",
        )


def _normalize_email(email: Optional[str]) -> Optional[str]:
    if email is None:
        return None
    email = email.strip().lower()
    return email or None


class ClientService:
    """Service for client-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.audit = AuditService(db)

    async def get_client_by_id(self, tenant_id: UUID, client_id: UUID) -> Optional[Client]:
        stmt = select(Client).where(Client.id == client_id, Client.tenant_id == tenant_id)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_client_by_id_or_raise(self, tenant_id: UUID, client_id: UUID) -> Client:
        """
        Get client by ID or raise NotFoundError.

        Raises:
            NotFoundError: If client not found in the tenant
        """
        client = await self.get_client_by_id(tenant_id, client_id)
        if client is None:
            raise NotFoundError(resource_type="client", resource_id=str(client_id))
        return client

    async def get_client_by_email(self, tenant_id: UUID, email: str) -> Optional[Client]:
        stmt = select(Client).where(Client.tenant_id == tenant_id, Client.email == _normalize_email(email))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_clients(
        self,
        tenant_id: UUID,
        pagination: PaginationParams,
        search: Optional[str] = None,
        include_inactive: bool = False,
    ) -> tuple[list[Client], int]:
        conditions = [Client.tenant_id == tenant_id]
        if not include_inactive:
            conditions.append(Client.is_active.is_(True))
        if search:
            pattern = f"%{search}%"
            conditions.append(or_(Client.name.ilike(pattern), Client.email.ilike(pattern)))

        total = await self.db.scalar(select(func.count()).select_from(Client).where(*conditions))
        stmt = (
            select(Client)
            .where(*conditions)
            .order_by(Client.created_at.desc())
            .offset(pagination.offset)
            .limit(pagination.limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all()), total or 0

    async def search(self, tenant_id: UUID, query: str) -> list[Client]:
        """Active clients matching ``query`` on name, email, phone or passport; at most 20."""
        pattern = f"%{query.strip()}%"
        stmt = (
            select(Client)
            .where(
                Client.tenant_id == tenant_id,
                Client.is_active.is_(True),
                or_(
                    Client.name.ilike(pattern),
                    Client.email.ilike(pattern),
                    Client.phone.ilike(pattern),
                    Client.passport_number.ilike(pattern),
                ),
            )
            .order_by(Client.name)
            .limit(SEARCH_LIMIT)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def _ensure_email_free(
        self, tenant_id: UUID, email: Optional[str], exclude_id: Optional[UUID] = None
    ) -> None:
        if not email:
            return
        existing = await self.get_client_by_email(tenant_id, email)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateClientEmailError(email, existing.id)

    async def create_client(self, tenant_id: UUID, request: CreateClientRequest) -> Client:
        """
        Create a client.

        Raises:
            DuplicateClientEmailError: If the email is already used in the tenant
        """
        data = request.model_dump()
        data["email"] = _normalize_email(data.get("email"))
        await self._ensure_email_free(tenant_id, data["email"])

        client = Client(tenant_id=tenant_id, **data)
        self.db.add(client)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateClientEmailError(data["email"])
        await self.db.refresh(client)

        logger.info(
            "Client created",
            extra={"tenant_id": str(tenant_id), "client_id": str(client.id)}
        )
        return client

    async def update_client(
        self, tenant_id: UUID, client_id: UUID, request: UpdateClientRequest, user_id: Optional[UUID] = None
    ) -> Client:
        client = await self.get_client_by_id_or_raise(tenant_id, client_id)
        changes = request.model_dump(exclude_unset=True)
        diff = request.model_dump(mode="json", exclude_unset=True)

        if "email" in changes:
            changes["email"] = diff["email"] = _normalize_email(changes["email"])
            await self._ensure_email_free(tenant_id, changes["email"], exclude_id=client.id)

        for field, value in changes.items():
            setattr(client, field, value)
        if diff:
            self.audit.record(tenant_id, user_id, "UPDATE", "client", client.id, diff)

        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise DuplicateClientEmailError(changes.get("email") or "")
        await self.db.refresh(client)
        return client

    async def remove_client(self, tenant_id: UUID, client_id: UUID, user_id: Optional[UUID] = None) -> Client:
        """Soft delete."""
        client = await self.get_client_by_id_or_raise(tenant_id, client_id)
        client.is_active = False
        self.audit.record(
            tenant_id, user_id, "DEACTIVATE", "client", client.id, {"is_active": {"from": True, "to": False}}
        )
        await self.db.commit()
        await self.db.refresh(client)

        logger.info("Client deactivated", extra={"tenant_id": str(tenant_id), "client_id": str(client_id)})
        return client

    async def bulk_import(self, tenant_id: UUID, request: BulkImportRequest) -> BulkImportResult:
        """
        Import many clients.

        With ``atomic`` any failing row rolls back the whole import. With
        ``dry_run`` rows are validated and counted but nothing is written.
        Duplicate emails (in the tenant or earlier in the same batch) are
        skipped when ``skip_duplicates`` is set and reported as errors otherwise.
        """
        result = BulkImportResult(dry_run=request.dry_run)
        seen_emails: set[str] = set()
        pending: list[Client] = []

        for row, entry in enumerate(request.clients, start=1):
            data = entry.model_dump()
            email = _normalize_email(data.get("email"))
            data["email"] = email

            duplicate = False
            if email:
                duplicate = email in seen_emails or (
                    await self.get_client_by_email(tenant_id, email)
                ) is not None

            if duplicate:
                if request.skip_duplicates:
                    result.skipped += 1
                    continue
                result.errors.append(BulkImportError(
                    row=row, email=email, error=f"Client with email {email} already exists"
                ))
                if request.atomic:
                    break
                continue

            if email:
                seen_emails.add(email)
            pending.append(Client(tenant_id=tenant_id, **data))

        if request.atomic and result.errors:
            logger.warning(
                "Atomic client import aborted",
                extra={"tenant_id": str(tenant_id), "errors": len(result.errors)}
            )
            return result

        result.created = len(pending)
        if request.dry_run:
            return result

        self.db.add_all(pending)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ConflictError(detail=f"Client import failed: {e.orig}", code="CLIENT_IMPORT_FAILED")

        logger.info(
            "Clients imported",
            extra={
                "tenant_id": str(tenant_id),
                "created": result.created,
                "skipped": result.skipped,
                "errors": len(result.errors),
            }
        )
        return result
