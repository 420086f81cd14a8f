"""接口统一使用的 ``{msg, data, code}`` 响应外层结构。"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class ResponseEnvelope(BaseModel, Generic[DataT]):
    msg: str
    data: Optional[DataT] = None
    code: int
