"""测试配置和 fixtures"""
import pytest
from decimal import Decimal
from unittest.mock import Mock
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from redis import Redis
from redlock import Redlock

from app.db.base import Base
from app.models.product import Product
from app.core.security import CurrentUser, Role


@pytest.fixture
def db_engine():
    """内存 SQLite 引擎"""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def db_session(db_engine):
    """创建数据库会话"""
    SessionLocal = sessionmaker(bind=db_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def mock_redis():
    """创建模拟 Redis 客户端"""
    redis_mock = Mock(spec=Redis)
    redis_mock.get.return_value = None
    redis_mock.setex.return_value = True
    redis_mock.delete.return_value = 1
    redis_mock.mget.return_value = [None, None]
    redis_mock.pipeline.return_value = Mock()
    return redis_mock


@pytest.fixture
def mock_redlock():
    """创建模拟 Redlock 分布式锁"""
    redlock_mock = Mock(spec=Redlock)
    redlock_mock.lock.side_effect = lambda resource, ttl: Mock(resource=resource)
    redlock_mock.unlock.return_value = None
    return redlock_mock


@pytest.fixture
def make_product(db_session):
    """创建商品的工厂"""
    def _make(price="10.00", stock=5, name="测试商品", seller_id=100, description=None):
        product = Product(
            seller_id=seller_id,
            name=name,
            description=description,
            price=Decimal(price),
            stock=stock,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture
def buyer():
    return CurrentUser(id=7, role=Role.BUYER)


@pytest.fixture
def seller():
    return CurrentUser(id=100, role=Role.SELLER)


@pytest.fixture
def admin():
    return CurrentUser(id=1, role=Role.ADMIN)
