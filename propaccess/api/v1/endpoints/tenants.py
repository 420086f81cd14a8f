"""租户相关路由：使用原生 SQL 与 ``restrict_tenants`` 组合查询，驼峰列名按当前方言引用。"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from propaccess.api.v1.schemas.properties import TenantListResponse
from propaccess.core.datascope import DataFilter
from propaccess.core.dependencies import get_data_filter, get_db
from propaccess.core.query_filters import placeholder_for, qualified_column, restrict_tenants
from propaccess.core.responses import create_response

router = APIRouter(prefix="/tenants", tags=["tenants"])


@router.get("", response_model=TenantListResponse)
def list_tenants(
    name: Optional[str] = Query(None, description="租户名称模糊匹配"),
    db: Session = Depends(get_db),
    data_filter: DataFilter = Depends(get_data_filter),
) -> dict:
    connection = db.connection()
    dialect = connection.dialect
    mark = placeholder_for(dialect.paramstyle)
    tenant_id = qualified_column("t", "tenantId", dialect)

    query = f"SELECT {tenant_id}, t.name, t.email FROM tenant t WHERE 1=1"
    params: list = []
    if name:
        query += f" AND t.name LIKE {mark}"
        params.append(f"%{name}%")

    query, params = restrict_tenants(
        query, params, data_filter.accessible_tenants, placeholder=mark, dialect=dialect
    )
    rows = connection.exec_driver_sql(f"{query} ORDER BY {tenant_id}", tuple(params)).all()
    items = [{"id": row[0], "name": row[1], "email": row[2]} for row in rows]
    return create_response("获取租户列表成功", items)
