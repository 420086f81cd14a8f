"""角色注册表：把数值型 roleId 归类为固定的角色类别。

所有需要区分管理员/业主/员工的逻辑都应基于 ``RoleClass``，
而不是各自重复 ``3 <= role_id <= 6`` 之类的区间判断。
"""

from enum import Enum

from propaccess.core.constants import ADMIN_ROLE_ID, OWNER_ROLE_ID, STAFF_ROLE_IDS


class RoleClass(str, Enum):
    ADMIN = "admin"
    OWNER = "owner"
    STAFF = "staff"
    CUSTOM = "custom"


def classify(role_id: int) -> RoleClass:
    """返回 ``role_id`` 对应的角色类别，未知 ID 一律归为 ``CUSTOM``。"""
    if role_id == ADMIN_ROLE_ID:
        return RoleClass.ADMIN
    if role_id == OWNER_ROLE_ID:
        return RoleClass.OWNER
    if role_id in STAFF_ROLE_IDS:
        return RoleClass.STAFF
    return RoleClass.CUSTOM
