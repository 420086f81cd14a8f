"""数据域模型：描述一次请求中“当前用户可以看到哪些记录”。

职责：
- ``Actor``：认证后的请求主体 {user_id, role_id}；
- ``ScopeSet``：某一类实体的可见 ID 集合，三态取值：
  ``UNRESTRICTED``（不过滤）、``EMPTY``（无任何访问权）、``RESTRICTED(ids)``；
- ``DataFilter``：一次请求内各类实体数据域的聚合结果，构建后只读。

说明：
- 不使用 ``None`` 表示“不过滤”，避免与“尚未计算”混淆；
- ``restricted([])`` 会被规整为 ``EMPTY``，绝不会变成 ``UNRESTRICTED``。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Union

from propaccess.core.constants import UNRESTRICTED_LABEL
from propaccess.core.roles import RoleClass, classify


@dataclass(frozen=True)
class Actor:
    user_id: int
    role_id: int

    @property
    def role_class(self) -> RoleClass:
        return classify(self.role_id)


class ScopeKind(str, Enum):
    UNRESTRICTED = "unrestricted"
    EMPTY = "empty"
    RESTRICTED = "restricted"


@dataclass(frozen=True)
class ScopeSet:
    kind: ScopeKind
    ids: frozenset[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", ScopeKind(self.kind))
        ids = frozenset(int(x) for x in self.ids)
        if self.kind is ScopeKind.RESTRICTED and not ids:
            object.__setattr__(self, "kind", ScopeKind.EMPTY)
        elif self.kind is not ScopeKind.RESTRICTED and ids:
            raise ValueError(f"{self.kind.value} scope cannot carry ids")
        object.__setattr__(self, "ids", ids)

    @classmethod
    def unrestricted(cls) -> "ScopeSet":
        return cls(ScopeKind.UNRESTRICTED)

    @classmethod
    def empty(cls) -> "ScopeSet":
        return cls(ScopeKind.EMPTY)

    @classmethod
    def restricted(cls, ids: Iterable[int]) -> "ScopeSet":
        """由 ID 集合构造受限数据域；集合为空时得到 ``EMPTY``。"""
        return cls(ScopeKind.RESTRICTED, frozenset(ids))

    @property
    def is_unrestricted(self) -> bool:
        return self.kind is ScopeKind.UNRESTRICTED

    @property
    def is_empty(self) -> bool:
        return self.kind is ScopeKind.EMPTY

    @property
    def is_restricted(self) -> bool:
        return self.kind is ScopeKind.RESTRICTED

    def allows(self, entity_id: Any) -> bool:
        if self.is_unrestricted:
            return True
        try:
            return int(entity_id) in self.ids
        except (TypeError, ValueError):
            return False

    def union(self, other: "ScopeSet") -> "ScopeSet":
        if self.is_unrestricted or other.is_unrestricted:
            return ScopeSet.unrestricted()
        return ScopeSet.restricted(self.ids | other.ids)

    def sorted_ids(self) -> list[int]:
        return sorted(self.ids)

    def describe(self) -> Union[str, int]:
        """日志/摘要用：不过滤时返回 ``"ALL"``，否则返回可见数量。"""
        if self.is_unrestricted:
            return UNRESTRICTED_LABEL
        return len(self.ids)

    def __repr__(self) -> str:
        if self.is_restricted:
            return f"ScopeSet.restricted({self.sorted_ids()})"
        return f"ScopeSet.{self.kind.value}()"


@dataclass(frozen=True)
class DataFilter:
    """单次请求的数据域聚合结果，由 ``DataFilterService`` 构建，构建后不再修改。"""

    actor: Actor
    assigned_buildings: ScopeSet
    assigned_villas: ScopeSet
    accessible_tenants: ScopeSet
    accessible_apartments: ScopeSet
    accessible_transactions: ScopeSet
    manageable_users: ScopeSet

    @classmethod
    def for_admin(cls, actor: Actor) -> "DataFilter":
        everything = ScopeSet.unrestricted()
        return cls(
            actor=actor,
            assigned_buildings=everything,
            assigned_villas=everything,
            accessible_tenants=everything,
            accessible_apartments=everything,
            accessible_transactions=everything,
            manageable_users=everything,
        )

    @property
    def role_class(self) -> RoleClass:
        return self.actor.role_class

    @property
    def is_admin(self) -> bool:
        return self.role_class is RoleClass.ADMIN

    @property
    def is_owner(self) -> bool:
        return self.role_class is RoleClass.OWNER

    @property
    def is_staff(self) -> bool:
        return self.role_class is RoleClass.STAFF

    def can_access_property(self, property_type: str, property_id: Any) -> bool:
        """判断能否访问某个物业（``building`` / ``villa``），未知类型一律拒绝。"""
        if property_type == "building":
            return self.assigned_buildings.allows(property_id)
        if property_type == "villa":
            return self.assigned_villas.allows(property_id)
        return False

    def can_manage_user(self, user_id: Any) -> bool:
        return self.manageable_users.allows(user_id)

    def summary(self) -> dict[str, Any]:
        return {
            "user_id": self.actor.user_id,
            "role_id": self.actor.role_id,
            "role": self.role_class.value,
            "buildings": self.assigned_buildings.describe(),
            "villas": self.assigned_villas.describe(),
            "tenants": self.accessible_tenants.describe(),
            "apartments": self.accessible_apartments.describe(),
            "transactions": self.accessible_transactions.describe(),
            "users": self.manageable_users.describe(),
        }
