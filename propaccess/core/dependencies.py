"""依赖注入模块：封装 FastAPI 中复用度高的依赖函数。"""

from collections.abc import Generator
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from propaccess.core.constants import ACCESS_TOKEN_TYPE
from propaccess.core.datascope import Actor, DataFilter
from propaccess.core.security import decode_token
from propaccess.db import session as db_session
from propaccess.models import User
from propaccess.services.data_filter_service import data_filter_service

security_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    """生成一个数据库会话，并在请求结束后自动关闭。"""
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
    db: Session = Depends(get_db),
) -> Actor:
    """解析 ``Authorization`` 头部，返回当前请求主体 {user_id, role_id}。"""
    if not credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="缺少认证信息")

    if credentials.scheme.lower() != ACCESS_TOKEN_TYPE:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="认证类型无效")

    payload = decode_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token 无效或已过期")

    try:
        user_id = int(payload["user_id"])
    except (KeyError, TypeError, ValueError):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token 无效")

    user = db.get(User, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="用户不存在")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="用户未激活")

    return Actor(user_id=user.id, role_id=user.role_id)


async def get_data_filter(request: Request, actor: Actor = Depends(get_current_actor)) -> DataFilter:
    """为当前请求构建 ``DataFilter`` 并挂载到 ``request.state``。

    构建失败时 ``DataFilteringError`` 向上抛出，由全局处理器返回 500。
    """
    data_filter = await data_filter_service.build(actor)
    request.state.data_filter = data_filter
    return data_filter
