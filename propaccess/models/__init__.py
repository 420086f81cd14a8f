"""模型包初始化，便于统一导入 ORM 实体并触发模型注册。"""

from propaccess.models.financial import FinancialTransaction
from propaccess.models.property import Apartment, Building, Floor, Villa
from propaccess.models.tenant import Tenant
from propaccess.models.user import User

__all__ = [
    "Apartment",
    "Building",
    "FinancialTransaction",
    "Floor",
    "Tenant",
    "User",
    "Villa",
]
