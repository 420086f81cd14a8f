"""数据域解析器：按用户的楼宇/别墅分配计算各类实体的可见集合。

层级关系：
- 分配：buildingAssigned / villaAssigned → 已分配楼宇、别墅；
- 派生：楼宇 → 楼层 → 公寓 → 租户 → 财务流水；别墅 → 入住租户 → 财务流水；
- 用户管理：管理员管理全部，业主管理自己创建的账号及自身，其余角色仅自身。

失败策略（fail closed）：查询出错时记录日志、把 ``StoreUnavailableError``
追加到 ``resolver.failures``，并返回收紧后的数据域（``EMPTY`` 或仅自身），
绝不返回 ``UNRESTRICTED``。是否据此拒绝请求由调用方（``DataFilterService``）决定。
"""

from __future__ import annotations

from typing import Callable

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from propaccess.core.datascope import Actor, ScopeSet
from propaccess.core.exceptions import StoreUnavailableError
from propaccess.core.logger import logger
from propaccess.core.roles import RoleClass
from propaccess.models import Apartment, FinancialTransaction, Floor, User
from propaccess.models.base import (
    apartment_assigned,
    building_assigned,
    villa_assigned,
    villa_tenant_assigned,
)


def _require_resolved(name: str, scope: object) -> ScopeSet:
    # 派生数据域必须基于已解析完成的父级数据域
    if not isinstance(scope, ScopeSet):
        raise TypeError(f"{name} must be a resolved ScopeSet, got {scope!r}")
    return scope


class ScopeResolver:
    """针对单个请求主体的解析器，持有一个数据库会话，不跨请求复用。"""

    def __init__(self, db: Session, actor: Actor) -> None:
        self.db = db
        self.actor = actor
        self.failures: list[StoreUnavailableError] = []

    @property
    def is_admin(self) -> bool:
        return self.actor.role_class is RoleClass.ADMIN

    def _fetch_ids(self, operation: str, query: Callable[[], list[int]], fallback: ScopeSet) -> ScopeSet:
        try:
            ids = query()
        except SQLAlchemyError as exc:
            logger.error(
                "Scope resolution failed: operation=%s user_id=%s role_id=%s",
                operation,
                self.actor.user_id,
                self.actor.role_id,
                exc_info=True,
            )
            self.failures.append(StoreUnavailableError(operation, self.actor.user_id, exc))
            self._reset_session()
            return fallback
        return ScopeSet.restricted(ids)

    def _reset_session(self) -> None:
        # 失败后回滚，使同一会话上的后续查询仍可执行
        try:
            self.db.rollback()
        except SQLAlchemyError:
            logger.warning("Rollback after scope resolution failure did not succeed", exc_info=True)

    # ---------------------------
    # 分配解析
    # ---------------------------
    def get_assigned_buildings(self) -> ScopeSet:
        """返回分配给当前用户的楼宇；管理员不过滤，无分配时为 ``EMPTY``。"""
        if self.is_admin:
            return ScopeSet.unrestricted()
        stmt = select(building_assigned.c.buildingId).where(building_assigned.c.userId == self.actor.user_id)
        return self._fetch_ids(
            "get_assigned_buildings",
            lambda: list(self.db.scalars(stmt)),
            ScopeSet.empty(),
        )

    def get_assigned_villas(self) -> ScopeSet:
        if self.is_admin:
            return ScopeSet.unrestricted()
        stmt = select(villa_assigned.c.villasId).where(villa_assigned.c.userId == self.actor.user_id)
        return self._fetch_ids(
            "get_assigned_villas",
            lambda: list(self.db.scalars(stmt)),
            ScopeSet.empty(),
        )

    # ---------------------------
    # 派生数据域
    # ---------------------------
    def get_accessible_apartments(self, assigned_buildings: ScopeSet) -> ScopeSet:
        """已分配楼宇内的全部公寓（公寓 → 楼层 → 楼宇）。"""
        parent = _require_resolved("assigned_buildings", assigned_buildings)
        if parent.is_unrestricted:
            return ScopeSet.unrestricted()
        if parent.is_empty:
            return ScopeSet.empty()
        stmt = (
            select(Apartment.id)
            .join(Floor, Apartment.floor_id == Floor.id)
            .where(Floor.building_id.in_(parent.sorted_ids()))
        )
        return self._fetch_ids(
            "get_accessible_apartments",
            lambda: list(self.db.scalars(stmt)),
            ScopeSet.empty(),
        )

    def get_accessible_tenants(self, assigned_buildings: ScopeSet) -> ScopeSet:
        """入住在已分配楼宇公寓中的租户。"""
        parent = _require_resolved("assigned_buildings", assigned_buildings)
        if parent.is_unrestricted:
            return ScopeSet.unrestricted()
        if parent.is_empty:
            return ScopeSet.empty()
        stmt = (
            select(apartment_assigned.c.tenantId)
            .join(Apartment, apartment_assigned.c.apartmentId == Apartment.id)
            .join(Floor, Apartment.floor_id == Floor.id)
            .where(Floor.building_id.in_(parent.sorted_ids()))
            .distinct()
        )
        return self._fetch_ids(
            "get_accessible_tenants",
            lambda: list(self.db.scalars(stmt)),
            ScopeSet.empty(),
        )

    def get_accessible_transactions(self, assigned_buildings: ScopeSet, assigned_villas: ScopeSet) -> ScopeSet:
        """楼宇路径与别墅路径可达的财务流水并集（已去重）。

        任一父级为 ``UNRESTRICTED`` 时不过滤；两者均为 ``EMPTY`` 时直接返回 ``EMPTY``。
        """
        buildings = _require_resolved("assigned_buildings", assigned_buildings)
        villas = _require_resolved("assigned_villas", assigned_villas)
        if buildings.is_unrestricted or villas.is_unrestricted:
            return ScopeSet.unrestricted()
        if buildings.is_empty and villas.is_empty:
            return ScopeSet.empty()

        def _query() -> list[int]:
            ids: set[int] = set()
            if buildings.is_restricted:
                via_buildings = (
                    select(FinancialTransaction.id)
                    .join(apartment_assigned, FinancialTransaction.tenant_id == apartment_assigned.c.tenantId)
                    .join(Apartment, apartment_assigned.c.apartmentId == Apartment.id)
                    .join(Floor, Apartment.floor_id == Floor.id)
                    .where(Floor.building_id.in_(buildings.sorted_ids()))
                    .distinct()
                )
                ids.update(self.db.scalars(via_buildings))
            if villas.is_restricted:
                via_villas = (
                    select(FinancialTransaction.id)
                    .join(villa_tenant_assigned, FinancialTransaction.tenant_id == villa_tenant_assigned.c.tenantId)
                    .where(villa_tenant_assigned.c.villaId.in_(villas.sorted_ids()))
                    .distinct()
                )
                ids.update(self.db.scalars(via_villas))
            return list(ids)

        return self._fetch_ids("get_accessible_transactions", _query, ScopeSet.empty())

    # ---------------------------
    # 可管理用户
    # ---------------------------
    def get_manageable_users(self) -> ScopeSet:
        """管理员 → 全部；业主 → 自己创建的账号及自身；员工/自定义角色 → 仅自身。"""
        role_class = self.actor.role_class
        own_id = self.actor.user_id
        if role_class is RoleClass.ADMIN:
            return ScopeSet.unrestricted()
        if role_class is not RoleClass.OWNER:
            # TODO: 自定义角色（roleId >= 7）的继承规则确定后在此扩展，目前与员工一致仅管理自身
            return ScopeSet.restricted({own_id})

        stmt = select(User.id).where(or_(User.created_by == own_id, User.id == own_id))
        return self._fetch_ids(
            "get_manageable_users",
            lambda: list(self.db.scalars(stmt)) + [own_id],
            ScopeSet.restricted({own_id}),
        )
