"""Data retention schemas."""

from typing import Dict

from pydantic import BaseModel, Field


class RetentionPolicy(BaseModel):
    """Retention windows in days."""

    client_inactive_days: int
    audit_log_days: int
    idempotency_key_days: int
    lead_days: int
    booking_archive_days: int


class RetentionRunResult(BaseModel):
    """Rows affected by a retention run."""

    clients_archived: int = 0
    audit_logs_deleted: int = 0
    idempotency_keys_deleted: int = 0
    leads_deleted: int = 0


class RetentionStats(BaseModel):
    """Policy plus rows a run would affect right now."""

    retention_policy: RetentionPolicy
    pending_actions: Dict[str, int] = Field(default_factory=dict)
    next_run: Dict[str, str] = Field(default_factory=dict)
