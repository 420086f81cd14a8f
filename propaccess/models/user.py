"""用户模型：系统账号，``createdBy`` 记录创建该账号的用户（业主创建员工）。"""

from typing import List, Optional

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propaccess.models.base import Base, TimestampMixin, building_assigned, villa_assigned


class User(TimestampMixin, Base):
    __tablename__ = "user"

    id: Mapped[int] = mapped_column("userId", Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(50), unique=True, index=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role_id: Mapped[int] = mapped_column("roleId", Integer, index=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        "createdBy", Integer, ForeignKey("user.userId"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column("isActive", Boolean, default=True)

    buildings: Mapped[List["Building"]] = relationship(
        "Building",
        secondary=building_assigned,
        back_populates="assignees",
    )
    villas: Mapped[List["Villa"]] = relationship(
        "Villa",
        secondary=villa_assigned,
        back_populates="assignees",
    )
