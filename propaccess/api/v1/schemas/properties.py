"""物业、租户与用户列表的响应模型。"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from propaccess.api.v1.schemas.common import ResponseEnvelope


class BuildingItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    address: Optional[str] = None


class TenantItem(BaseModel):
    id: int
    name: str
    email: Optional[str] = None


class UserItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role_id: int
    created_by: Optional[int] = None


class BuildingListResponse(ResponseEnvelope[List[BuildingItem]]):
    pass


class BuildingDetailResponse(ResponseEnvelope[BuildingItem]):
    pass


class TenantListResponse(ResponseEnvelope[List[TenantItem]]):
    pass


class UserListResponse(ResponseEnvelope[List[UserItem]]):
    pass
