"""用户相关路由：仅列出当前用户可管理的账号。"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from propaccess.api.v1.schemas.properties import UserItem, UserListResponse
from propaccess.core.datascope import DataFilter
from propaccess.core.dependencies import get_data_filter, get_db
from propaccess.core.query_filters import restrict_select
from propaccess.core.responses import create_response
from propaccess.models import User

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
def list_manageable_users(
    db: Session = Depends(get_db),
    data_filter: DataFilter = Depends(get_data_filter),
) -> dict:
    stmt = restrict_select(select(User).order_by(User.id), data_filter.manageable_users, User.id)
    items = [UserItem.model_validate(u).model_dump() for u in db.scalars(stmt)]
    return create_response("获取用户列表成功", items)
