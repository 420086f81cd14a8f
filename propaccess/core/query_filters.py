"""查询增强助手：按数据域为 SQL 追加过滤条件。

- ``restrict``：面向原生 SQL 文本 + 位置参数列表，返回新的 (query, params)；
- ``restrict_select``：面向 SQLAlchemy Core ``Select`` 语句；
- ``restrict_buildings`` 等：按实体预置列名与表别名的快捷函数，列名按方言加引号
  （驼峰列名在 PostgreSQL 中必须以 ``"tenantId"`` 形式引用）。

三种数据域分别处理：
- ``UNRESTRICTED``：原样返回；
- ``EMPTY``：追加恒假条件 ``1=0``，避免生成非法的 ``IN ()``；
- ``RESTRICTED``：追加 ``col IN (?, ?, ...)``，ID 只通过参数绑定传入。

所有函数均为纯函数，不修改入参。
"""

from __future__ import annotations

import re
from typing import Any, NamedTuple, Optional, Sequence

from sqlalchemy import ColumnElement, Select, false
from sqlalchemy.engine import Dialect
from sqlalchemy.engine.default import DefaultDialect

from propaccess.core.datascope import ScopeSet

ALWAYS_FALSE_PREDICATE = "1=0"

_IDENTIFIER = r'(?:[A-Za-z_][A-Za-z0-9_]*|"[A-Za-z_][A-Za-z0-9_]*"|`[A-Za-z_][A-Za-z0-9_]*`)'
_COLUMN_REF_RE = re.compile(rf"^{_IDENTIFIER}(\.{_IDENTIFIER})?$")

# 未指定方言时使用 ANSI 双引号
_ANSI_DIALECT = DefaultDialect()


class RestrictedQuery(NamedTuple):
    query: str
    params: list[Any]


def restrict(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    column_ref: str,
    *,
    placeholder: str = "?",
) -> RestrictedQuery:
    """在 ``base_query`` 末尾追加 ``AND`` 过滤条件。

    ``base_query`` 需已包含 ``WHERE`` 子句（可使用 ``WHERE 1=1`` 起始）。
    ``column_ref`` 仅允许形如 ``col`` 或 ``alias.col`` 的标识符，各段可用双引号或反引号引用。
    """
    if not isinstance(scope, ScopeSet):
        raise TypeError(f"scope must be a ScopeSet, got {type(scope).__name__}")
    if not _COLUMN_REF_RE.match(column_ref or ""):
        raise ValueError(f"Invalid column reference: {column_ref!r}")

    new_params = list(params)
    if scope.is_unrestricted:
        return RestrictedQuery(base_query, new_params)
    if scope.is_empty:
        return RestrictedQuery(f"{base_query} AND {ALWAYS_FALSE_PREDICATE}", new_params)

    ids = scope.sorted_ids()
    placeholders = ", ".join(placeholder for _ in ids)
    return RestrictedQuery(
        f"{base_query} AND {column_ref} IN ({placeholders})",
        new_params + ids,
    )


def restrict_select(stmt: Select, scope: ScopeSet, column: ColumnElement) -> Select:
    """``restrict`` 的 SQLAlchemy 版本：``column.in_(ids)`` / 恒假条件。"""
    if not isinstance(scope, ScopeSet):
        raise TypeError(f"scope must be a ScopeSet, got {type(scope).__name__}")
    if scope.is_unrestricted:
        return stmt
    if scope.is_empty:
        return stmt.where(false())
    return stmt.where(column.in_(scope.sorted_ids()))


def qualified_column(table_alias: str, column: str, dialect: Optional[Dialect] = None) -> str:
    """按方言引用 ``alias.column``；PostgreSQL 下驼峰列名会被加上双引号。"""
    preparer = (dialect or _ANSI_DIALECT).identifier_preparer
    return f"{preparer.quote(table_alias)}.{preparer.quote(column)}"


def _restrict_entity(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str,
    column: str,
    placeholder: str,
    dialect: Optional[Dialect],
) -> RestrictedQuery:
    column_ref = qualified_column(table_alias, column, dialect)
    return restrict(base_query, params, scope, column_ref, placeholder=placeholder)


def restrict_buildings(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "b",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "buildingId", placeholder, dialect)


def restrict_villas(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "v",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "villasId", placeholder, dialect)


def restrict_tenants(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "t",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "tenantId", placeholder, dialect)


def restrict_apartments(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "a",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "apartmentId", placeholder, dialect)


def restrict_transactions(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "ft",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "transactionId", placeholder, dialect)


def restrict_users(
    base_query: str,
    params: Sequence[Any],
    scope: ScopeSet,
    table_alias: str = "u",
    *,
    placeholder: str = "?",
    dialect: Optional[Dialect] = None,
) -> RestrictedQuery:
    return _restrict_entity(base_query, params, scope, table_alias, "userId", placeholder, dialect)


def placeholder_for(paramstyle: str) -> str:
    """根据 DB-API ``paramstyle`` 返回位置参数占位符。"""
    if paramstyle == "qmark":
        return "?"
    if paramstyle in {"format", "pyformat"}:
        return "%s"
    raise ValueError(f"Unsupported positional paramstyle: {paramstyle}")
