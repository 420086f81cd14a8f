"""财务流水模型：每笔流水归属一个租户。"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from propaccess.models.base import Base, TimestampMixin


class FinancialTransaction(TimestampMixin, Base):
    __tablename__ = "financialTransaction"

    id: Mapped[int] = mapped_column("transactionId", Integer, primary_key=True, index=True)
    tenant_id: Mapped[int] = mapped_column("tenantId", ForeignKey("tenant.tenantId"), index=True)
    transaction_type: Mapped[str] = mapped_column("transactionType", String(50), default="Rent Payment")
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    currency: Mapped[str] = mapped_column(String(3), default="AED")
    status: Mapped[Optional[str]] = mapped_column(String(20), default="Pending", nullable=True)
