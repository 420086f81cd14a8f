"""测试夹具：为 pytest 提供数据库、种子数据与客户端的共享配置。

种子数据（session 级，只读共享）：

用户 (userId, roleId, createdBy)：
    1 admin(1)        2 owner_a(2)          3 staff_a(3, by 2)   4 staff_b(4, by 2)
    5 staff_c(5)      6 owner_b(2)          7 custom_a(9, by 6)  8 inactive(3)
楼宇 → 楼层 → 公寓：
    10 → 100 → 1000, 10 → 101 → 1001, 11 → 110 → 1100, 12 → 120 → 1200/1201
别墅：20, 21, 22
租户入住：500@1000, 501@1001, 502@1100, 503@1200, 504@villa20, 505@villa21
楼宇分配：owner_a → 10, 11；staff_a → 10；staff_c → 12
别墅分配：owner_a → 20；staff_b → 21
财务流水：9000/9006 → 500, 9001 → 501, 9002 → 502, 9003 → 503, 9004 → 504, 9005 → 505
"""

import os
from typing import Generator

TEST_DB_PATH = os.path.join(os.path.dirname(__file__), "test.db")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from propaccess.core.dependencies import get_db
from propaccess.core.security import create_access_token
from propaccess.db import session as db_session
from propaccess.db.init_db import init_db
from propaccess.main import app
from propaccess.models import Apartment, Building, FinancialTransaction, Floor, Tenant, User, Villa
from propaccess.models.base import (
    Base,
    apartment_assigned,
    building_assigned,
    villa_assigned,
    villa_tenant_assigned,
)

TEST_DATABASE_URL = f"sqlite:///{TEST_DB_PATH}"


def seed_property_graph(db: Session) -> None:
    """写入模块文档中描述的楼宇/租户/用户分配关系。"""
    db.add_all(
        [
            User(id=2, username="owner_a", role_id=2),
            User(id=3, username="staff_a", role_id=3, created_by=2),
            User(id=4, username="staff_b", role_id=4, created_by=2),
            User(id=5, username="staff_c", role_id=5),
            User(id=6, username="owner_b", role_id=2),
            User(id=7, username="custom_a", role_id=9, created_by=6),
            User(id=8, username="inactive", role_id=3, is_active=False),
            Building(id=10, name="Marina Tower"),
            Building(id=11, name="Creek Heights"),
            Building(id=12, name="Palm Residence"),
            Floor(id=100, building_id=10),
            Floor(id=101, building_id=10),
            Floor(id=110, building_id=11),
            Floor(id=120, building_id=12),
            Apartment(id=1000, floor_id=100, number="A-1"),
            Apartment(id=1001, floor_id=101, number="A-2"),
            Apartment(id=1100, floor_id=110, number="B-1"),
            Apartment(id=1200, floor_id=120, number="C-1"),
            Apartment(id=1201, floor_id=120, number="C-2"),
            Villa(id=20, name="Villa Jasmine"),
            Villa(id=21, name="Villa Orchid"),
            Villa(id=22, name="Villa Lotus"),
        ]
        + [Tenant(id=tenant_id, name=f"tenant-{tenant_id}") for tenant_id in range(500, 506)]
    )
    db.flush()
    db.add_all(
        [
            FinancialTransaction(id=9000, tenant_id=500, amount=1000),
            FinancialTransaction(id=9001, tenant_id=501, amount=1100),
            FinancialTransaction(id=9002, tenant_id=502, amount=1200),
            FinancialTransaction(id=9003, tenant_id=503, amount=1300),
            FinancialTransaction(id=9004, tenant_id=504, amount=5000),
            FinancialTransaction(id=9005, tenant_id=505, amount=5100),
            FinancialTransaction(id=9006, tenant_id=500, amount=250),
        ]
    )
    db.execute(
        apartment_assigned.insert(),
        [
            {"tenantId": 500, "apartmentId": 1000},
            {"tenantId": 501, "apartmentId": 1001},
            {"tenantId": 502, "apartmentId": 1100},
            {"tenantId": 503, "apartmentId": 1200},
        ],
    )
    db.execute(
        villa_tenant_assigned.insert(),
        [{"villaId": 20, "tenantId": 504}, {"villaId": 21, "tenantId": 505}],
    )
    db.execute(
        building_assigned.insert(),
        [
            {"userId": 2, "buildingId": 10},
            {"userId": 2, "buildingId": 11},
            {"userId": 3, "buildingId": 10},
            {"userId": 5, "buildingId": 12},
        ],
    )
    db.execute(
        villa_assigned.insert(),
        [{"userId": 2, "villasId": 20}, {"userId": 4, "villasId": 21}],
    )
    db.commit()


@pytest.fixture(scope="session", autouse=True)
def setup_test_database() -> Generator[None, None, None]:
    """创建隔离的 SQLite 测试数据库，并在会话结束后清理。"""
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    db_session.engine = engine
    db_session.SessionLocal = TestingSessionLocal

    Base.metadata.create_all(bind=engine)
    init_db()
    with TestingSessionLocal() as db:
        seed_property_graph(db)
    yield

    engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture()
def db_session_fixture() -> Generator[Session, None, None]:
    """提供给测试用例使用的数据库会话。"""
    session = db_session.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def query_counter() -> Generator[list[str], None, None]:
    """记录测试期间发往数据库的 SELECT 语句。"""
    statements: list[str] = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            statements.append(statement)

    event.listen(db_session.engine, "before_cursor_execute", _record)
    try:
        yield statements
    finally:
        event.remove(db_session.engine, "before_cursor_execute", _record)


@pytest.fixture()
def broken_session_factory() -> Generator[sessionmaker, None, None]:
    """指向空库（无任何表）的会话工厂，所有查询都会失败。"""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    try:
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    finally:
        engine.dispose()


@pytest.fixture()
def client(db_session_fixture):
    """构建 FastAPI TestClient，并注入测试专用的数据库依赖。"""
    def override_get_db() -> Generator[Session, None, None]:
        session = db_session.SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def auth_headers():
    """按用户 ID 生成 Bearer 认证头的工厂。"""
    def _build(user_id: int) -> dict[str, str]:
        token = create_access_token({"user_id": user_id})
        return {"Authorization": f"Bearer {token}"}

    return _build
