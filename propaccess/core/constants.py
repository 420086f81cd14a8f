"""常量定义：集中维护默认响应码、令牌类型与内置角色 ID。"""

HTTP_STATUS_OK = 200

ACCESS_TOKEN_TYPE = "bearer"

# 内置角色 ID（与 role 表保持一致）
ADMIN_ROLE_ID = 1
OWNER_ROLE_ID = 2
STAFF_ROLE_IDS = frozenset({3, 4, 5, 6})

DEFAULT_ADMIN_USERNAME = "admin"

# 数据域摘要中表示“不过滤”的取值
UNRESTRICTED_LABEL = "ALL"
