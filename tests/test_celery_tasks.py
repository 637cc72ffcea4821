"""Celery 任务单元测试"""
import pytest
from unittest.mock import Mock, patch

from tasks.shop_tasks import (
    warm_stock_cache,
    audit_order_totals
)


class TestShopTasks:
    """商城 Celery 任务测试类"""

    def test_warm_stock_cache_success(self):
        """测试库存缓存预热成功"""
        service_mock = Mock()
        service_mock.batch_get_stocks.return_value = {1: 10, 2: 0}
        db_mock = Mock()

        with patch('tasks.shop_tasks.SessionLocal') as mock_session_local, \
             patch('tasks.shop_tasks.CatalogService') as mock_catalog_service, \
             patch('tasks.shop_tasks.redis_client') as mock_redis:

            mock_session_local.return_value = db_mock
            mock_catalog_service.return_value = service_mock

            result = warm_stock_cache([1, 2])

            assert result == {"1": 10, "2": 0}
            mock_catalog_service.assert_called_once_with(db_mock, mock_redis)
            service_mock.batch_get_stocks.assert_called_once_with([1, 2])
            db_mock.close.assert_called_once()

    def test_warm_stock_cache_exception(self):
        """测试库存缓存预热异常"""
        db_mock = Mock()

        with patch('tasks.shop_tasks.SessionLocal') as mock_session_local, \
             patch('tasks.shop_tasks.CatalogService') as mock_catalog_service:

            mock_session_local.return_value = db_mock
            mock_catalog_service.side_effect = Exception("数据库错误")

            with pytest.raises(Exception) as exc_info:
                warm_stock_cache([1])

            assert "数据库错误" in str(exc_info.value)
            db_mock.rollback.assert_called_once()
            db_mock.close.assert_called_once()

    def test_audit_order_totals_success(self):
        """测试订单总额核对任务"""
        service_mock = Mock()
        service_mock.audit_order_totals.return_value = [3, 8]
        db_mock = Mock()

        with patch('tasks.shop_tasks.SessionLocal') as mock_session_local, \
             patch('tasks.shop_tasks.OrderService') as mock_order_service:

            mock_session_local.return_value = db_mock
            mock_order_service.return_value = service_mock

            result = audit_order_totals(batch_size=100)

            assert result == [3, 8]
            service_mock.audit_order_totals.assert_called_once_with(100)
            db_mock.close.assert_called_once()

    def test_audit_order_totals_exception(self):
        """测试订单总额核对任务异常"""
        db_mock = Mock()

        with patch('tasks.shop_tasks.SessionLocal') as mock_session_local, \
             patch('tasks.shop_tasks.OrderService') as mock_order_service:

            mock_session_local.return_value = db_mock
            mock_order_service.return_value.audit_order_totals.side_effect = Exception("核对出错")

            with pytest.raises(Exception) as exc_info:
                audit_order_totals(batch_size=50)

            assert "核对出错" in str(exc_info.value)
            db_mock.rollback.assert_called_once()
