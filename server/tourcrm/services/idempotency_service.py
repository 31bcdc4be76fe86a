"""Idempotency service for handling duplicate requests."""

import hashlib
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.exceptions import PROBLEM_BASE_URI, ProblemDetailsException
from ..models.idempotency import IdempotencyKey

logger = logging.getLogger(__name__)


class IdempotencyMismatchError(ProblemDetailsException):
    """Exception when idempotency key is reused with different request body."""

    def __init__(self, idempotency_key: str, path: str):
        super().__init__(
            status_code=422,
            title="Idempotency Key Mismatch",
            detail=(
                f"Idempotency key '{idempotency_key}' was already used for '{path}' "
                f"with a different request body"
            ),
            type_uri=f"{PROBLEM_BASE_URI}/idempotency-key-mismatch",
            extensions={
                "code": "IDEMPOTENCY_KEY_MISMATCH",
                "retryable": False,
                "idempotency_key": idempotency_key,
                "path": path,
            },
        )


def compute_request_hash(request_body: Any) -> str:
    """SHA-256 of the body serialized with sorted keys."""
    normalized = json.dumps(request_body, sort_keys=True, separators=(',', ':'), default=str)
    return hashlib.sha256(normalized.encode('utf-8')).hexdigest()


class IdempotencyService:
    """Service for handling idempotent operations, scoped per tenant."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def check_idempotency(
        self,
        tenant_id: UUID,
        idempotency_key: str,
        path: str,
        method: str,
        request_body: Any,
    ) -> Optional[tuple[int, Any]]:
        """
        Look up a stored response for ``idempotency_key``.

        Args:
            tenant_id: Tenant the key belongs to
            idempotency_key: Client-supplied key
            path: Request path
            method: HTTP method
            request_body: Request body to hash and compare

        Returns:
            Tuple of (status_code, response_body) if a stored response exists,
            None if this is a new request

        Raises:
            IdempotencyMismatchError: If key exists with different request body
        """
        request_hash = compute_request_hash(request_body)

        stmt = select(IdempotencyKey).where(
            IdempotencyKey.tenant_id == tenant_id,
            IdempotencyKey.key == idempotency_key,
        )
        result = await self.db.execute(stmt)
        existing_record = result.scalar_one_or_none()

        if existing_record is None:
            logger.info(
                "No existing idempotency record found",
                extra={
                    "tenant_id": str(tenant_id),
                    "idempotency_key": idempotency_key,
                    "path": path,
                    "request_hash": request_hash[:8]
                }
            )
            return None

        if existing_record.expires_at <= datetime.utcnow():
            # Expired keys are dropped so the request runs again
            await self.db.delete(existing_record)
            await self.db.commit()
            logger.info(
                "Expired idempotency record removed",
                extra={"tenant_id": str(tenant_id), "idempotency_key": idempotency_key}
            )
            return None

        if existing_record.request_body_hash != request_hash:
            logger.warning(
                "Idempotency key mismatch",
                extra={
                    "tenant_id": str(tenant_id),
                    "idempotency_key": idempotency_key,
                    "path": path,
                    "existing_hash": existing_record.request_body_hash[:8],
                    "new_hash": request_hash[:8]
                }
            )
            raise IdempotencyMismatchError(idempotency_key, path)

        logger.info(
            "Returning cached idempotent response",
            extra={
                "tenant_id": str(tenant_id),
                "idempotency_key": idempotency_key,
                "path": path,
                "method": method,
                "status_code": existing_record.response_status,
                "created_at": existing_record.created_at.isoformat()
            }
        )

        return existing_record.response_status, json.loads(existing_record.response_body)

    async def store_response(
        self,
        tenant_id: UUID,
        idempotency_key: str,
        path: str,
        method: str,
        request_body: Any,
        status_code: int,
        response_body: Any,
        ttl_hours: Optional[int] = None,
    ) -> bool:
        """
        Store the response of a successful guarded operation.

        Non-2xx responses are not stored. A concurrent insert of the same key
        loses on the unique constraint and is ignored.

        Returns:
            True if a record was written
        """
        if not 200 <= status_code <= 299:
            return False

        ttl = ttl_hours if ttl_hours is not None else settings.idempotency_ttl_hours
        expires_at = datetime.utcnow() + timedelta(hours=ttl)

        record = IdempotencyKey(
            tenant_id=tenant_id,
            key=idempotency_key,
            request_path=path,
            request_method=method.upper(),
            request_body_hash=compute_request_hash(request_body),
            response_status=status_code,
            response_body=json.dumps(response_body, sort_keys=True, separators=(',', ':'), default=str),
            expires_at=expires_at
        )

        try:
            self.db.add(record)
            await self.db.commit()

            logger.info(
                "Stored idempotency record",
                extra={
                    "tenant_id": str(tenant_id),
                    "idempotency_key": idempotency_key,
                    "path": path,
                    "status_code": status_code,
                    "expires_at": expires_at.isoformat()
                }
            )
            return True

        except IntegrityError as e:
            await self.db.rollback()
            logger.info(
                "Idempotency record already exists (race condition)",
                extra={
                    "tenant_id": str(tenant_id),
                    "idempotency_key": idempotency_key,
                    "error": str(e)
                }
            )
            return False

    async def cleanup_expired_records(self) -> int:
        """
        Delete records whose TTL has passed.

        Returns:
            Number of records deleted
        """
        stmt = delete(IdempotencyKey).where(
            IdempotencyKey.expires_at <= datetime.utcnow()
        )

        result = await self.db.execute(stmt)
        deleted_count = result.rowcount

        await self.db.commit()

        if deleted_count > 0:
            logger.info(
                "Cleaned up expired idempotency records",
                extra={"deleted_count": deleted_count}
            )

        return deleted_count
