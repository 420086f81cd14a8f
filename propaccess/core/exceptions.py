"""异常处理模块：定义统一的业务异常、数据域解析异常与响应格式。"""

from typing import Optional

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse

from propaccess.core.logger import logger

INTERNAL_ERROR_MESSAGE = "服务器内部错误"


class AppException(HTTPException):
    """携带统一响应结构的业务异常，方便在全局处理中转换响应体。"""

    def __init__(self, msg: str, code: int = status.HTTP_400_BAD_REQUEST, data=None) -> None:
        super().__init__(status_code=code, detail=msg)
        self.data = data


class StoreUnavailableError(Exception):
    """数据域解析过程中访问关系库失败（连接不可用或查询出错）。"""

    def __init__(self, operation: str, user_id: int, cause: Optional[BaseException] = None) -> None:
        super().__init__(f"{operation} failed for user {user_id}: {cause}")
        self.operation = operation
        self.user_id = user_id
        self.cause = cause


class DataFilteringError(Exception):
    """DataFilter 组装失败。调用方必须拒绝本次请求，不得以默认放开的数据域继续执行。"""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:  # pragma: no cover - framework glue
    """将 FastAPI 的 ``HTTPException`` 转换为统一响应格式。"""
    payload = {"msg": exc.detail, "data": getattr(exc, "data", None), "code": exc.status_code}
    return JSONResponse(status_code=exc.status_code, content=payload, headers=getattr(exc, "headers", None))


async def data_filtering_exception_handler(request: Request, exc: DataFilteringError) -> JSONResponse:
    """数据域解析失败时返回通用 500，内部原因只写入服务端日志。"""
    logger.error(
        "Data filtering failed on %s %s: %s (cause: %r)",
        request.method,
        request.url.path,
        exc.message,
        exc.cause,
        exc_info=exc,
    )
    payload = {
        "msg": INTERNAL_ERROR_MESSAGE,
        "data": None,
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # pragma: no cover - framework glue
    """兜底处理：将未捕获异常转换为标准的 500 响应结构。"""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    payload = {
        "msg": INTERNAL_ERROR_MESSAGE,
        "data": None,
        "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
    }
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=payload)
