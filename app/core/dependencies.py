"""依赖注入配置模块"""

import logging
import time

from fastapi import Depends

# 数据库会话依赖
from app.db.session import SessionLocal
from sqlalchemy.orm import Session

# Redis 依赖
from app.core.config import settings
from app.core.redis import redis_client, redlock
from app.core.security import Role, get_current_user, require_role

logger = logging.getLogger(__name__)


_redis_down_until = 0.0


def get_redis():
    """获取同步 Redis 客户端，Redis 不可用时返回 None（降级为无缓存）

    探测失败后 REDIS_RETRY_INTERVAL 秒内直接降级，不再逐个请求等待连接超时。
    """
    global _redis_down_until
    if time.monotonic() < _redis_down_until:
        return None
    try:
        redis_client.ping()
    except Exception as e:
        _redis_down_until = time.monotonic() + settings.REDIS_RETRY_INTERVAL
        logger.warning(f"Redis 不可用，降级为无缓存模式: {e}")
        return None
    return redis_client

def get_redlock(redis = Depends(get_redis)):
    """获取 Redlock 分布式锁实例，Redis 不可用或未配置服务器时返回 None"""
    if redis is None or not redlock.servers:
        return None
    return redlock

def get_db() -> Session:
    """获取数据库会话"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 常用的依赖注入别名
DatabaseDep = Depends(get_db)
RedisDep = Depends(get_redis)
RedlockDep = Depends(get_redlock)
CurrentUserDep = Depends(get_current_user)
BuyerDep = Depends(require_role(Role.BUYER))
SellerDep = Depends(require_role(Role.SELLER))
