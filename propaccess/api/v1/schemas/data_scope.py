"""数据域相关的响应模型。"""

from typing import Union

from pydantic import BaseModel, Field

from propaccess.api.v1.schemas.common import ResponseEnvelope

ScopeSize = Union[int, str]


class DataScopeSummary(BaseModel):
    """当前用户的数据域摘要；``"ALL"`` 表示不过滤，数字表示可见数量。"""

    user_id: int
    role_id: int
    role: str
    is_admin: bool
    is_owner: bool
    is_staff: bool
    buildings: ScopeSize
    villas: ScopeSize
    tenants: ScopeSize
    apartments: ScopeSize
    transactions: ScopeSize
    users: ScopeSize
    building_ids: list[int] = Field(default_factory=list)
    villa_ids: list[int] = Field(default_factory=list)


class DataScopeResponse(ResponseEnvelope[DataScopeSummary]):
    """数据域摘要接口的响应结构。"""
