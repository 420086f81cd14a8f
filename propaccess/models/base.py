"""模型基类：统一声明式基类、通用时间戳字段与分配关系表。

本模块集中提供：
- Base：SQLAlchemy 声明式基类，带统一命名约定；
- TimestampMixin：`createdAt`、`updatedAt`；
- 四张分配（关联）表，沿用既有库的表名与列名：
  - buildingAssigned(userId, buildingId)：楼宇分配给用户（业主/员工）；
  - villaAssigned(userId, villasId)：别墅分配给用户；
  - apartmentAssigned(tenantId, apartmentId)：租户入住公寓；
  - villasAssigned(villaId, tenantId)：租户入住别墅。
"""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, MetaData, Table, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata_obj = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """全局声明式基类，附带一致的命名约定，便于迁移与调试。"""

    metadata = metadata_obj


class TimestampMixin:
    """通用时间戳字段，为记录新增、更新提供审计能力。"""

    created_at: Mapped[datetime] = mapped_column(
        "createdAt",
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        "updatedAt",
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


building_assigned = Table(
    "buildingAssigned",
    Base.metadata,
    Column("userId", Integer, ForeignKey("user.userId"), primary_key=True, index=True),
    Column("buildingId", Integer, ForeignKey("building.buildingId"), primary_key=True, index=True),
    Column("createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

villa_assigned = Table(
    "villaAssigned",
    Base.metadata,
    Column("userId", Integer, ForeignKey("user.userId"), primary_key=True, index=True),
    Column("villasId", Integer, ForeignKey("villas.villasId"), primary_key=True, index=True),
    Column("createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

apartment_assigned = Table(
    "apartmentAssigned",
    Base.metadata,
    Column("tenantId", Integer, ForeignKey("tenant.tenantId"), primary_key=True, index=True),
    Column("apartmentId", Integer, ForeignKey("apartment.apartmentId"), primary_key=True, index=True),
    Column("createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

villa_tenant_assigned = Table(
    "villasAssigned",
    Base.metadata,
    Column("villaId", Integer, ForeignKey("villas.villasId"), primary_key=True, index=True),
    Column("tenantId", Integer, ForeignKey("tenant.tenantId"), primary_key=True, index=True),
    Column("createdAt", DateTime(timezone=True), server_default=func.now(), nullable=False),
)
