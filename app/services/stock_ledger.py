"""库存台账

所有方法都只在调用方的事务内执行，不做 commit / rollback，
由调用方决定整个工作单元的提交或回滚。
"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientStock, ProductUnavailable
from app.models.product import Product
from app.models.stock_logs import StockLog, ChangeType

logger = logging.getLogger(__name__)


class StockLedger:
    """商品库存的唯一写入口"""

    def __init__(self, db: Session):
        self.db = db

    def lock_product(self, product_id: int) -> Optional[Product]:
        """使用行级锁读取商品（SELECT ... FOR UPDATE）"""
        return self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def current_stock(self, product_id: int) -> Optional[int]:
        return self.db.execute(
            select(Product.stock).where(Product.id == product_id)
        ).scalar_one_or_none()

    def reserve(self, product_id: int, quantity: int, order_id: Optional[int] = None,
                operator: Optional[str] = None) -> int:
        """扣减库存，返回扣减后的库存

        扣减前在同一条 UPDATE 中重新校验库存（stock >= quantity），
        并发提交不会把库存扣成负数。
        """
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            available = self.current_stock(product_id)
            if available is None:
                raise ProductUnavailable(product_id)
            logger.warning(
                f"库存扣减失败: product_id={product_id}, requested={quantity}, available={available}"
            )
            raise InsufficientStock(product_id, quantity, available)

        # 刷新会话中的商品对象
        after = self.db.execute(
            select(Product)
            .where(Product.id == product_id)
            .execution_options(populate_existing=True)
        ).scalar_one().stock

        self.db.add(StockLog(
            product_id=product_id,
            order_id=order_id,
            change_type=ChangeType.ORDER_COMMIT,
            quantity=-quantity,
            before_stock=after + quantity,
            after_stock=after,
            operator=operator or f"order_{order_id}",
            source="order_service",
        ))
        return after

    def adjust(self, product: Product, new_stock: int, operator: str) -> int:
        """卖家/管理员直接设置库存"""
        before = product.stock
        if before == new_stock:
            return before

        product.stock = new_stock
        self.db.add(StockLog(
            product_id=product.id,
            order_id=None,
            change_type=ChangeType.ADJUST,
            quantity=new_stock - before,
            before_stock=before,
            after_stock=new_stock,
            operator=operator,
            source="catalog_service",
        ))
        logger.info(f"库存调整: product_id={product.id}, {before} -> {new_stock}, operator={operator}")
        return new_stock
