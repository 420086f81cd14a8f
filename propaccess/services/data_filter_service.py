"""数据域组装服务：为单次请求构建完整的 ``DataFilter``。

两个互不依赖的分支并发执行，各自在线程池中使用独立的数据库会话：
- 物业分支：楼宇、别墅分配 → 公寓、租户、财务流水；
- 用户分支：可管理用户。

组装要么整体成功，要么抛出单一的 ``DataFilteringError``；任何子解析失败、
异常或超时都不会产出部分填充的 ``DataFilter``。错误只由调用方记录一次
（HTTP 层见 ``data_filtering_exception_handler``）。结果不做跨请求缓存。
"""

from __future__ import annotations

import asyncio
from typing import Callable, NamedTuple, Optional

from anyio import to_thread
from sqlalchemy.orm import Session

from propaccess.core.config import get_settings
from propaccess.core.datascope import Actor, DataFilter, ScopeSet
from propaccess.core.exceptions import DataFilteringError, StoreUnavailableError
from propaccess.core.logger import logger
from propaccess.core.roles import RoleClass
from propaccess.db import session as db_session
from propaccess.services.scope_resolver import ScopeResolver


class PropertyScopes(NamedTuple):
    assigned_buildings: ScopeSet
    assigned_villas: ScopeSet
    accessible_apartments: ScopeSet
    accessible_tenants: ScopeSet
    accessible_transactions: ScopeSet


class DataFilterService:
    def __init__(
        self,
        session_factory: Optional[Callable[[], Session]] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self._session_factory = session_factory
        self._timeout = timeout

    @property
    def session_factory(self) -> Callable[[], Session]:
        # 延迟读取，测试中可替换 db_session.SessionLocal
        return self._session_factory or db_session.SessionLocal

    @property
    def timeout(self) -> float:
        if self._timeout is not None:
            return self._timeout
        return get_settings().data_filter_timeout_seconds

    # ---------------------------
    # 分支
    # ---------------------------
    def _resolve_property_scopes(self, actor: Actor) -> tuple[PropertyScopes, list[StoreUnavailableError]]:
        with self.session_factory() as db:
            resolver = ScopeResolver(db, actor)
            buildings = resolver.get_assigned_buildings()
            villas = resolver.get_assigned_villas()
            scopes = PropertyScopes(
                assigned_buildings=buildings,
                assigned_villas=villas,
                accessible_apartments=resolver.get_accessible_apartments(buildings),
                accessible_tenants=resolver.get_accessible_tenants(buildings),
                accessible_transactions=resolver.get_accessible_transactions(buildings, villas),
            )
            return scopes, resolver.failures

    def _resolve_manageable_users(self, actor: Actor) -> tuple[ScopeSet, list[StoreUnavailableError]]:
        with self.session_factory() as db:
            resolver = ScopeResolver(db, actor)
            return resolver.get_manageable_users(), resolver.failures

    def _assemble(
        self,
        actor: Actor,
        properties: tuple[PropertyScopes, list[StoreUnavailableError]],
        users: tuple[ScopeSet, list[StoreUnavailableError]],
    ) -> DataFilter:
        scopes, property_failures = properties
        manageable_users, user_failures = users
        failures = property_failures + user_failures
        if failures:
            first = failures[0]
            raise DataFilteringError(
                f"Scope resolution failed for user {actor.user_id} ({len(failures)} store error(s), first in {first.operation})",
                cause=first,
            ) from first

        data_filter = DataFilter(
            actor=actor,
            assigned_buildings=scopes.assigned_buildings,
            assigned_villas=scopes.assigned_villas,
            accessible_tenants=scopes.accessible_tenants,
            accessible_apartments=scopes.accessible_apartments,
            accessible_transactions=scopes.accessible_transactions,
            manageable_users=manageable_users,
        )
        logger.debug("Data filter resolved: %s", data_filter.summary())
        return data_filter

    # ---------------------------
    # 对外接口
    # ---------------------------
    async def build(self, actor: Actor) -> DataFilter:
        """并发解析两个分支并组装 ``DataFilter``，失败统一抛出 ``DataFilteringError``。"""
        if actor.role_class is RoleClass.ADMIN:
            return DataFilter.for_admin(actor)

        try:
            properties, users = await asyncio.wait_for(
                asyncio.gather(
                    to_thread.run_sync(self._resolve_property_scopes, actor, abandon_on_cancel=True),
                    to_thread.run_sync(self._resolve_manageable_users, actor, abandon_on_cancel=True),
                ),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise DataFilteringError(
                f"Scope resolution timed out after {self.timeout:.2f}s for user {actor.user_id}", cause=exc
            ) from exc
        except Exception as exc:
            raise DataFilteringError(f"Scope resolution raised for user {actor.user_id}", cause=exc) from exc

        return self._assemble(actor, properties, users)

    def resolve(self, actor: Actor) -> DataFilter:
        """``build`` 的同步顺序版本，供脚本与同步调用方使用，失败语义相同（不含超时）。"""
        if actor.role_class is RoleClass.ADMIN:
            return DataFilter.for_admin(actor)
        try:
            properties = self._resolve_property_scopes(actor)
            users = self._resolve_manageable_users(actor)
        except Exception as exc:
            raise DataFilteringError(f"Scope resolution raised for user {actor.user_id}", cause=exc) from exc
        return self._assemble(actor, properties, users)


data_filter_service = DataFilterService()
