"""租户模型：通过 apartmentAssigned / villasAssigned 关联到所住物业。"""

from typing import List, Optional

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propaccess.models.base import Base, TimestampMixin, apartment_assigned, villa_tenant_assigned


class Tenant(TimestampMixin, Base):
    __tablename__ = "tenant"

    id: Mapped[int] = mapped_column("tenantId", Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    apartments: Mapped[List["Apartment"]] = relationship(
        "Apartment",
        secondary=apartment_assigned,
        back_populates="tenants",
    )
    villas: Mapped[List["Villa"]] = relationship(
        "Villa",
        secondary=villa_tenant_assigned,
        back_populates="tenants",
    )
