"""HTTP 层集成测试：认证、数据域摘要以及按数据域过滤的列表接口。"""

import logging

from fastapi.testclient import TestClient
from jose import jwt

from propaccess.core.config import get_settings
from propaccess.core.exceptions import DataFilteringError
from propaccess.services.data_filter_service import data_filter_service
from propaccess.services.scope_resolver import ScopeResolver


def test_health_check(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["data"] == {"status": "healthy"}


def test_request_id_header_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["x-request-id"] == "req-123"

    generated = client.get("/health").headers.get("x-request-id")
    assert generated


def test_missing_token_is_rejected(client: TestClient):
    response = client.get("/api/v1/data-scope")
    assert response.status_code == 401
    assert response.json()["msg"] == "缺少认证信息"


def test_invalid_token_is_rejected(client: TestClient):
    response = client.get("/api/v1/data-scope", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401
    assert response.json()["code"] == 401


def test_token_without_user_id_is_rejected(client: TestClient):
    settings = get_settings()
    token = jwt.encode({"sub": "someone"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
    response = client.get("/api/v1/data-scope", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


def test_unknown_and_inactive_users(client: TestClient, auth_headers):
    assert client.get("/api/v1/data-scope", headers=auth_headers(4040)).status_code == 401

    response = client.get("/api/v1/data-scope", headers=auth_headers(8))
    assert response.status_code == 403
    assert response.json()["msg"] == "用户未激活"


def test_data_scope_for_admin(client: TestClient, auth_headers):
    response = client.get("/api/v1/data-scope", headers=auth_headers(1))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["is_admin"] is True
    assert data["buildings"] == "ALL"
    assert data["users"] == "ALL"
    assert data["building_ids"] == []


def test_data_scope_for_owner(client: TestClient, auth_headers):
    response = client.get("/api/v1/data-scope", headers=auth_headers(2))
    assert response.status_code == 200
    payload = response.json()
    assert payload["msg"] == "获取数据域成功"
    data = payload["data"]
    assert data["role"] == "owner"
    assert data["is_owner"] is True
    assert data["buildings"] == 2
    assert data["villas"] == 1
    assert data["tenants"] == 3
    assert data["apartments"] == 3
    assert data["transactions"] == 5
    assert data["users"] == 3
    assert data["building_ids"] == [10, 11]
    assert data["villa_ids"] == [20]


def test_building_list_is_filtered(client: TestClient, auth_headers):
    staff = client.get("/api/v1/buildings", headers=auth_headers(3)).json()["data"]
    assert [item["id"] for item in staff] == [10]

    admin = client.get("/api/v1/buildings", headers=auth_headers(1)).json()["data"]
    assert [item["id"] for item in admin] == [10, 11, 12]

    nobody = client.get("/api/v1/buildings", headers=auth_headers(4)).json()["data"]
    assert nobody == []


def test_building_detail_checks_scope_before_existence(client: TestClient, auth_headers):
    ok = client.get("/api/v1/buildings/10", headers=auth_headers(3))
    assert ok.status_code == 200
    assert ok.json()["data"]["name"] == "Marina Tower"

    forbidden = client.get("/api/v1/buildings/11", headers=auth_headers(3))
    assert forbidden.status_code == 403

    # 无权用户无法通过状态码区分“不存在”与“无权访问”
    assert client.get("/api/v1/buildings/999", headers=auth_headers(3)).status_code == 403
    assert client.get("/api/v1/buildings/999", headers=auth_headers(1)).status_code == 404


def test_tenant_list_uses_raw_sql_filter(client: TestClient, auth_headers):
    owner = client.get("/api/v1/tenants", headers=auth_headers(2)).json()["data"]
    assert [item["id"] for item in owner] == [500, 501, 502]

    filtered = client.get("/api/v1/tenants", params={"name": "501"}, headers=auth_headers(2)).json()["data"]
    assert [item["id"] for item in filtered] == [501]

    outside = client.get("/api/v1/tenants", params={"name": "503"}, headers=auth_headers(2)).json()["data"]
    assert outside == []

    assert client.get("/api/v1/tenants", headers=auth_headers(4)).json()["data"] == []


def test_user_list_is_limited_to_manageable_users(client: TestClient, auth_headers):
    owner = client.get("/api/v1/users", headers=auth_headers(2)).json()["data"]
    assert [item["id"] for item in owner] == [2, 3, 4]

    staff = client.get("/api/v1/users", headers=auth_headers(5)).json()["data"]
    assert [item["id"] for item in staff] == [5]


def test_data_filtering_error_becomes_generic_500(client: TestClient, auth_headers, monkeypatch):
    async def _fail(actor):
        raise DataFilteringError("store down", cause=RuntimeError("connection refused"))

    monkeypatch.setattr(data_filter_service, "build", _fail)

    response = client.get("/api/v1/buildings", headers=auth_headers(2))
    assert response.status_code == 500
    payload = response.json()
    assert payload["msg"] == "服务器内部错误"
    assert payload["data"] is None
    assert "store down" not in response.text
    assert "connection refused" not in response.text


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.ERROR)
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


def test_data_filtering_error_is_logged_once(client: TestClient, auth_headers, monkeypatch):
    """解析失败只在异常处理器中记录一条带堆栈的错误日志。"""
    def _explode(self):
        raise RuntimeError("users branch crashed")

    monkeypatch.setattr(ScopeResolver, "get_manageable_users", _explode)
    handler = _ListHandler()
    app_logger = logging.getLogger("propaccess")
    app_logger.addHandler(handler)
    try:
        response = client.get("/api/v1/data-scope", headers=auth_headers(3))
    finally:
        app_logger.removeHandler(handler)

    assert response.status_code == 500
    assert len(handler.records) == 1
    record = handler.records[0]
    assert record.getMessage().startswith("Data filtering failed on GET /api/v1/data-scope")
    assert record.exc_info is not None
    assert "users branch crashed" not in response.text
