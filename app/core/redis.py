"""Redis 客户端配置模块"""

import os
from redis import Redis
from redis.asyncio import Redis as AsyncRedis
from redlock import Redlock

from app.core.config import settings

REDIS_URL = f"redis://{settings.REDIS_HOST}:{settings.REDIS_PORT}/{settings.REDIS_DB}"

# 库存缓存 key / 商品锁 key
STOCK_CACHE_KEY = "stock:available:{product_id}"
PRODUCT_LOCK_KEY = "lock:product:{product_id}"

redis_client = Redis.from_url(
    REDIS_URL,
    decode_responses=True,
    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
)
async_redis = AsyncRedis.from_url(
    REDIS_URL,
    decode_responses=True,
    socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
    socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
)


def stock_cache_key(product_id: int) -> str:
    return STOCK_CACHE_KEY.format(product_id=product_id)


def product_lock_key(product_id: int) -> str:
    return PRODUCT_LOCK_KEY.format(product_id=product_id)


# Redlock 配置（支持单实例和多实例）
def create_redlock():
    """根据环境变量动态创建 Redlock 实例"""
    redis_hosts = os.getenv("REDIS_HOSTS", settings.REDIS_HOST)

    if "," in redis_hosts:  # 多实例模式
        servers = [
            {"host": host.strip(), "port": settings.REDIS_PORT, "db": settings.REDIS_DB,
             "socket_connect_timeout": settings.REDIS_SOCKET_TIMEOUT}
            for host in redis_hosts.split(",")
        ]
    else:  # 单实例模式
        servers = [
            {"host": settings.REDIS_HOST, "port": settings.REDIS_PORT, "db": settings.REDIS_DB,
             "socket_connect_timeout": settings.REDIS_SOCKET_TIMEOUT}
        ]

    return Redlock(servers)

redlock = create_redlock()

__all__ = [
    "redis_client",
    "async_redis",
    "redlock",
    "REDIS_URL",
    "stock_cache_key",
    "product_lock_key",
]
