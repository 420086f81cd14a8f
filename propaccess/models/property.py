"""物业模型：楼宇 → 楼层 → 公寓的层级结构，以及独立的别墅。"""

from typing import List, Optional

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from propaccess.models.base import (
    Base,
    TimestampMixin,
    apartment_assigned,
    building_assigned,
    villa_assigned,
    villa_tenant_assigned,
)


class Building(TimestampMixin, Base):
    __tablename__ = "building"

    id: Mapped[int] = mapped_column("buildingId", Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100))
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    floors: Mapped[List["Floor"]] = relationship("Floor", back_populates="building")
    assignees: Mapped[List["User"]] = relationship(
        "User",
        secondary=building_assigned,
        back_populates="buildings",
    )


class Floor(TimestampMixin, Base):
    __tablename__ = "floor"

    id: Mapped[int] = mapped_column("floorId", Integer, primary_key=True, index=True)
    building_id: Mapped[int] = mapped_column("buildingId", ForeignKey("building.buildingId"), index=True)
    name: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    building: Mapped["Building"] = relationship("Building", back_populates="floors")
    apartments: Mapped[List["Apartment"]] = relationship("Apartment", back_populates="floor")


class Apartment(TimestampMixin, Base):
    __tablename__ = "apartment"

    id: Mapped[int] = mapped_column("apartmentId", Integer, primary_key=True, index=True)
    floor_id: Mapped[int] = mapped_column("floorId", ForeignKey("floor.floorId"), index=True)
    number: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    floor: Mapped["Floor"] = relationship("Floor", back_populates="apartments")
    tenants: Mapped[List["Tenant"]] = relationship(
        "Tenant",
        secondary=apartment_assigned,
        back_populates="apartments",
    )


class Villa(TimestampMixin, Base):
    __tablename__ = "villas"

    id: Mapped[int] = mapped_column("villasId", Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column("Name", String(100))
    address: Mapped[Optional[str]] = mapped_column("Address", String(255), nullable=True)

    assignees: Mapped[List["User"]] = relationship(
        "User",
        secondary=villa_assigned,
        back_populates="villas",
    )
    tenants: Mapped[List["Tenant"]] = relationship(
        "Tenant",
        secondary=villa_tenant_assigned,
        back_populates="villas",
    )
