import os
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # 数据库配置
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "postgres")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "123456")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "shopdb")

    # Redis 配置
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_DB: int = int(os.getenv("REDIS_DB", "0"))
    # 连接/读写超时（秒），Redis 不可用时尽快降级
    REDIS_SOCKET_TIMEOUT: float = float(os.getenv("REDIS_SOCKET_TIMEOUT", "0.5"))
    # 探测失败后多久内不再尝试连接（秒）
    REDIS_RETRY_INTERVAL: float = float(os.getenv("REDIS_RETRY_INTERVAL", "30"))

    # 库存缓存过期时间（秒）
    STOCK_CACHE_TTL: int = int(os.getenv("STOCK_CACHE_TTL", "300"))
    # 商品分布式锁 TTL（毫秒）
    PRODUCT_LOCK_TTL_MS: int = int(os.getenv("PRODUCT_LOCK_TTL_MS", "10000"))

    # 商品列表分页
    DEFAULT_PAGE_SIZE: int = int(os.getenv("DEFAULT_PAGE_SIZE", "12"))

    @property
    def database_url(self) -> str:
        return (
            f"postgresql+psycopg://"
            f"{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/"
            f"{self.POSTGRES_DB}"
        )

settings = Settings()
