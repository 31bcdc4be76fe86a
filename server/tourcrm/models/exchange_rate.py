"""Exchange rate model definition."""

from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ..core.database import Base
from .enums import Currency
from .mixins import Rate, TenantScopedMixin, TimestampMixin, UUIDPrimaryKeyMixin


class ExchangeRate(UUIDPrimaryKeyMixin, TenantScopedMixin, TimestampMixin, Base):
    """Daily rate between two currencies: units of ``from_currency`` per one ``to_currency``."""

    __tablename__ = "exchange_rates"

    from_currency: Mapped[Currency] = mapped_column(String(3), nullable=False, default=Currency.TRY)
    to_currency: Mapped[Currency] = mapped_column(String(3), nullable=False, default=Currency.EUR)
    rate: Mapped[float] = mapped_column(Rate, nullable=False)
    rate_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        UniqueConstraint(
            "tenant_id", "from_currency", "to_currency", "rate_date",
            name="uq_exchange_rate_tenant_pair_date"
        ),
        CheckConstraint("rate > 0", name="ck_exchange_rate_positive"),
    )

    def __repr__(self) -> str:
        return (
            f"<ExchangeRate({self.from_currency}->{self.to_currency} "
            f"{self.rate} on {self.rate_date})>"
        )
