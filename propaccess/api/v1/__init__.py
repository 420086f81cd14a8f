"""API v1 汇总路由：统一挂载所有版本化的子路由。"""

from fastapi import APIRouter

from propaccess.api.v1.endpoints import buildings, data_scope, tenants, users

api_router = APIRouter()
api_router.include_router(data_scope.router)
api_router.include_router(buildings.router)
api_router.include_router(tenants.router)
api_router.include_router(users.router)
