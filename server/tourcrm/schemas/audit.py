"""Audit log schemas."""

from datetime import datetime
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel


class AuditLog(BaseModel):
    """Audit log response schema."""

    id: UUID
    tenant_id: UUID
    user_id: Optional[UUID] = None
    action: str
    entity: str
    entity_id: Optional[str] = None
    diff_json: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class AuditLogFilters(BaseModel):
    entity: Optional[str] = None
    entity_id: Optional[str] = None
    user_id: Optional[UUID] = None
    action: Optional[str] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None
