"""Idempotency key model definition."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .mixins import TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class IdempotencyKey(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Stored response of a guarded mutation, replayed for repeated keys."""

    __tablename__ = "idempotency_keys"

    key: Mapped[str] = mapped_column(String(255), nullable=False)

    # Request information
    request_path: Mapped[str] = mapped_column(String(500), nullable=False)
    request_method: Mapped[str] = mapped_column(String(10), nullable=False)
    request_body_hash: Mapped[str] = mapped_column(String(64), nullable=False)  # SHA-256 hash

    # Response information
    response_status: Mapped[int] = mapped_column(Integer, nullable=False)
    response_body: Mapped[str] = mapped_column(Text, nullable=False)  # JSON string

    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("tenant_id", "key", name="uq_idempotency_tenant_key"),
        CheckConstraint("length(key) > 0", name="ck_idempotency_key_not_empty"),
        CheckConstraint("length(request_body_hash) = 64", name="ck_idempotency_hash_length"),
        CheckConstraint("response_status >= 200", name="ck_idempotency_status_success_min"),
        CheckConstraint("response_status <= 299", name="ck_idempotency_status_success_max"),
    )

    def __repr__(self) -> str:
        return (
            f"<IdempotencyKey(id={self.id}, key='{self.key}', "
            f"path='{self.request_path}', status={self.response_status}, "
            f"expires_at={self.expires_at})>"
        )
