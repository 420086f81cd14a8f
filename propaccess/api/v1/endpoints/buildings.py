"""楼宇相关路由：列表与详情均按已分配楼宇过滤。"""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from propaccess.api.v1.schemas.properties import BuildingDetailResponse, BuildingItem, BuildingListResponse
from propaccess.core.datascope import DataFilter
from propaccess.core.dependencies import get_data_filter, get_db
from propaccess.core.exceptions import AppException
from propaccess.core.query_filters import restrict_select
from propaccess.core.responses import create_response
from propaccess.models import Building

router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("", response_model=BuildingListResponse)
def list_buildings(
    db: Session = Depends(get_db),
    data_filter: DataFilter = Depends(get_data_filter),
) -> dict:
    stmt = restrict_select(select(Building).order_by(Building.id), data_filter.assigned_buildings, Building.id)
    items = [BuildingItem.model_validate(b).model_dump() for b in db.scalars(stmt)]
    return create_response("获取楼宇列表成功", items)


@router.get("/{building_id}", response_model=BuildingDetailResponse)
def read_building(
    building_id: int,
    db: Session = Depends(get_db),
    data_filter: DataFilter = Depends(get_data_filter),
) -> dict:
    # 先校验数据域再查询，避免向无权用户暴露记录是否存在
    if not data_filter.can_access_property("building", building_id):
        raise AppException("无权访问该楼宇", status.HTTP_403_FORBIDDEN)
    building = db.get(Building, building_id)
    if building is None:
        raise AppException("楼宇不存在", status.HTTP_404_NOT_FOUND)
    return create_response("获取楼宇详情成功", BuildingItem.model_validate(building).model_dump())
