"""依赖注入与身份识别单元测试"""
import pytest
from unittest.mock import Mock, patch
from fastapi import HTTPException
from sqlalchemy.orm import Session

from app.core import dependencies
from app.core.config import settings
from app.core.dependencies import get_db, get_redis, get_redlock
from app.core.redis import redis_client
from app.core.security import CurrentUser, Role, ensure_role, get_current_user, require_role


class TestDependencies:
    """依赖注入测试类"""

    @pytest.fixture(autouse=True)
    def reset_redis_state(self, monkeypatch):
        monkeypatch.setattr(dependencies, "_redis_down_until", 0.0)

    def test_get_db(self):
        """测试数据库会话依赖"""
        with patch('app.core.dependencies.SessionLocal') as mock_session_local:
            db_mock = Mock(spec=Session)
            mock_session_local.return_value = db_mock

            gen = get_db()
            db = next(gen)

            assert db == db_mock
            mock_session_local.assert_called_once()

            gen.close()
            db_mock.close.assert_called_once()

    def test_get_redis_success(self):
        """测试 Redis 连接成功"""
        with patch('app.core.dependencies.redis_client') as mock_redis_client:
            mock_redis_client.ping.return_value = True

            redis_conn = get_redis()

            assert redis_conn == mock_redis_client
            mock_redis_client.ping.assert_called_once()

    def test_get_redis_failure(self):
        """测试 Redis 连接失败时降级"""
        with patch('app.core.dependencies.redis_client') as mock_redis_client:
            mock_redis_client.ping.side_effect = Exception("连接失败")

            assert get_redis() is None

    def test_get_redis_skips_ping_after_failure(self):
        """探测失败后一段时间内不再逐个请求探测"""
        with patch('app.core.dependencies.redis_client') as mock_redis_client:
            mock_redis_client.ping.side_effect = Exception("连接失败")

            assert get_redis() is None
            assert get_redis() is None

            mock_redis_client.ping.assert_called_once()

    def test_get_redis_retries_after_interval(self):
        with patch('app.core.dependencies.redis_client') as mock_redis_client, \
             patch('app.core.dependencies.time') as mock_time:
            mock_time.monotonic.return_value = 1000.0
            mock_redis_client.ping.side_effect = [Exception("连接失败"), True]

            assert get_redis() is None
            mock_time.monotonic.return_value = 1000.0 + settings.REDIS_RETRY_INTERVAL + 1

            assert get_redis() is mock_redis_client
            assert mock_redis_client.ping.call_count == 2

    def test_redis_client_has_timeouts(self):
        kwargs = redis_client.connection_pool.connection_kwargs

        assert kwargs["socket_connect_timeout"] == settings.REDIS_SOCKET_TIMEOUT
        assert kwargs["socket_timeout"] == settings.REDIS_SOCKET_TIMEOUT

    def test_get_redlock_success(self):
        with patch('app.core.dependencies.redlock') as mock_redlock:
            mock_redlock.servers = [Mock()]

            assert get_redlock(redis=Mock()) == mock_redlock

    def test_get_redlock_without_servers(self):
        with patch('app.core.dependencies.redlock') as mock_redlock:
            mock_redlock.servers = []

            assert get_redlock(redis=Mock()) is None

    def test_get_redlock_without_redis(self):
        """Redis 不可用时不使用分布式锁"""
        with patch('app.core.dependencies.redlock') as mock_redlock:
            mock_redlock.servers = [Mock()]

            assert get_redlock(redis=None) is None


class TestSecurity:
    """用户身份测试类"""

    def test_get_current_user(self):
        user = get_current_user(x_user_id="7", x_user_role="buyer")

        assert user == CurrentUser(id=7, role=Role.BUYER)
        assert not user.is_admin

    @pytest.mark.parametrize("user_id,role", [
        (None, "buyer"),
        ("7", None),
        ("abc", "buyer"),
        ("0", "buyer"),
        ("7", "guest"),
    ])
    def test_get_current_user_invalid(self, user_id, role):
        with pytest.raises(HTTPException) as exc_info:
            get_current_user(x_user_id=user_id, x_user_role=role)

        assert exc_info.value.status_code == 401

    def test_ensure_role(self, buyer, seller, admin):
        ensure_role(buyer, Role.BUYER)
        ensure_role(admin, Role.SELLER)

        with pytest.raises(HTTPException) as exc_info:
            ensure_role(seller, Role.BUYER)
        assert exc_info.value.status_code == 403

    def test_require_role(self, seller):
        checker = require_role(Role.SELLER)

        assert checker(user=seller) is seller
