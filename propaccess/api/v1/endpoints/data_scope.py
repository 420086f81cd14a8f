"""数据域摘要路由：返回当前用户在本次请求中的可见范围。"""

from fastapi import APIRouter, Depends

from propaccess.api.v1.schemas.data_scope import DataScopeResponse
from propaccess.core.datascope import DataFilter
from propaccess.core.dependencies import get_data_filter
from propaccess.core.responses import create_response

router = APIRouter(prefix="/data-scope", tags=["data-scope"])


@router.get("", response_model=DataScopeResponse)
def read_data_scope(data_filter: DataFilter = Depends(get_data_filter)) -> dict:
    data = {
        **data_filter.summary(),
        "is_admin": data_filter.is_admin,
        "is_owner": data_filter.is_owner,
        "is_staff": data_filter.is_staff,
        "building_ids": data_filter.assigned_buildings.sorted_ids(),
        "villa_ids": data_filter.assigned_villas.sorted_ids(),
    }
    return create_response("获取数据域成功", data)
