"""商城相关的 Celery 任务"""

from celery_app import app
from app.db.session import SessionLocal
from app.services.catalog_service import CatalogService
from app.services.order_service import OrderService
from app.core.redis import redis_client
import logging

logger = logging.getLogger(__name__)

@app.task(name='tasks.catalog.warm_stock_cache')
def warm_stock_cache(product_ids: list):
    """预热库存缓存

    Args:
        product_ids: 商品ID列表

    Returns:
        {商品ID: 库存} 映射（JSON 的 key 为字符串）
    """
    db = SessionLocal()
    try:
        service = CatalogService(db, redis_client)
        stocks = service.batch_get_stocks(product_ids)
        logger.info(f"库存缓存预热完成: {len(stocks)} 个商品")
        return {str(pid): stock for pid, stock in stocks.items()}
    except Exception as e:
        logger.error(f"库存缓存预热失败: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

@app.task(name='tasks.orders.audit_order_totals')
def audit_order_totals(batch_size: int = 500):
    """核对订单总额与明细合计

    Args:
        batch_size: 批处理大小，默认500条

    Returns:
        总额不一致的订单ID列表
    """
    db = SessionLocal()
    try:
        service = OrderService(db)
        mismatched = service.audit_order_totals(batch_size)
        if mismatched:
            logger.warning(f"发现 {len(mismatched)} 笔订单总额不一致: {mismatched}")
        return mismatched
    except Exception as e:
        logger.error(f"订单核对任务执行失败: {str(e)}")
        db.rollback()
        raise
    finally:
        db.close()

# 导出任务
__all__ = [
    'warm_stock_cache',
    'audit_order_totals',
]
