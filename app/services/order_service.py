"""订单服务实现（下单事务）"""

from collections import OrderedDict
from decimal import Decimal
from typing import Any, Dict, List, Sequence
import logging

from redis import Redis, RedisError
from redlock import Redlock
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.exceptions import (
    EmptyOrder,
    InsufficientStock,
    NotFound,
    PersistenceFailure,
    ProductUnavailable,
    ShopError,
    StockLockConflict,
    ValidationError,
)
from app.core.redis import product_lock_key, stock_cache_key
from app.core.security import CurrentUser
from app.models.order import Order
from app.services import order_aggregate, pricing
from app.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _field(item: Any, name: str) -> Any:
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


class OrderService:
    """订单核心服务类"""

    def __init__(self, db: Session, redis: Redis = None, rlock: Redlock = None):
        self.db = db
        self.redis = redis
        self.rlock = rlock

    @staticmethod
    def normalize_items(items: Sequence[Any]) -> "OrderedDict[int, int]":
        """校验下单明细并按商品ID合并数量

        返回按商品ID升序排列的 {product_id: quantity}，
        加锁也按这个顺序进行，避免死锁。
        """
        if items is None or isinstance(items, (str, bytes, dict)):
            raise ValidationError("商品列表必须是数组")
        if len(items) == 0:
            raise EmptyOrder()

        merged: Dict[int, int] = {}
        for item in items:
            product_id = _field(item, "product_id")
            quantity = _field(item, "quantity")
            if not _is_positive_int(product_id):
                raise ValidationError(f"商品ID不合法: {product_id!r}")
            if not _is_positive_int(quantity):
                raise ValidationError(
                    f"购买数量必须是正整数: product_id={product_id}, quantity={quantity!r}"
                )
            merged[product_id] = merged.get(product_id, 0) + quantity

        return OrderedDict(sorted(merged.items()))

    def place_order(self, buyer_id: int, items: Sequence[Any]) -> Order:
        """下单：校验库存 -> 冻结价格 -> 写订单及明细 -> 扣减库存

        整个过程在一个事务内完成，任一步失败都会整体回滚，
        不会留下订单、明细或库存变更。
        """
        if not _is_positive_int(buyer_id):
            raise ValidationError(f"买家ID不合法: {buyer_id!r}")
        requested = self.normalize_items(items)

        locks = self._acquire_locks(list(requested.keys()))
        try:
            ledger = StockLedger(self.db)

            snapshots: List[pricing.PriceSnapshot] = []
            for product_id, quantity in requested.items():
                product = ledger.lock_product(product_id)
                if product is None:
                    raise ProductUnavailable(product_id)
                if quantity > product.stock:
                    raise InsufficientStock(product_id, quantity, product.stock)
                snapshots.append(pricing.snapshot(product, quantity))

            order = order_aggregate.build(buyer_id, snapshots)
            self.db.add(order)
            self.db.flush()

            for line in snapshots:
                ledger.reserve(
                    line.product_id,
                    line.quantity,
                    order_id=order.id,
                    operator=f"buyer_{buyer_id}",
                )

            self.db.commit()
            logger.info(
                f"下单成功: order_id={order.id}, buyer_id={buyer_id}, "
                f"items={len(snapshots)}, total={order.total}"
            )
        except ShopError as e:
            self.db.rollback()
            logger.error(f"下单失败: buyer_id={buyer_id}, error={e.error}, detail={e.detail}")
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"下单事务失败: buyer_id={buyer_id}, error={str(e)}")
            raise PersistenceFailure() from e
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._release_locks(locks)

        self._invalidate_stock_cache(list(requested.keys()))
        return order

    def list_orders(self, buyer_id: int) -> List[Order]:
        """买家订单列表（按创建时间倒序）"""
        return list(self.db.execute(
            select(Order)
            .where(Order.buyer_id == buyer_id)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        ).scalars().all())

    def get_order(self, order_id: int, user: CurrentUser) -> Order:
        order = self.db.execute(
            select(Order)
            .where(Order.id == order_id)
            .options(selectinload(Order.items))
        ).scalar_one_or_none()

        # 非本人订单一律按不存在处理
        if order is None or (not user.is_admin and order.buyer_id != user.id):
            raise NotFound(f"订单不存在: order_id={order_id}")
        return order

    def audit_order_totals(self, batch_size: int = 500) -> List[int]:
        """核对订单总额与明细合计，返回不一致的订单ID"""
        mismatched: List[int] = []
        last_id = 0
        checked = 0

        while True:
            orders = self.db.execute(
                select(Order)
                .where(Order.id > last_id)
                .options(selectinload(Order.items))
                .order_by(Order.id)
                .limit(batch_size)
            ).scalars().all()

            if not orders:
                break

            for order in orders:
                expected = sum(
                    (Decimal(str(item.unit_price)) * item.quantity for item in order.items),
                    Decimal("0"),
                )
                if Decimal(str(order.total)) != expected:
                    logger.warning(
                        f"订单总额不一致: order_id={order.id}, total={order.total}, expected={expected}"
                    )
                    mismatched.append(order.id)

            checked += len(orders)
            last_id = orders[-1].id
            if len(orders) < batch_size:
                break

        logger.info(f"订单核对完成: 共核对 {checked} 笔订单, 不一致 {len(mismatched)} 笔")
        return mismatched

    def _acquire_locks(self, product_ids: List[int]) -> list:
        """按商品ID升序获取分布式锁"""
        locks = []
        if not self.rlock:
            return locks

        for product_id in product_ids:
            lock = self.rlock.lock(product_lock_key(product_id), settings.PRODUCT_LOCK_TTL_MS)
            if not lock:
                self._release_locks(locks)
                raise StockLockConflict()
            locks.append(lock)
        return locks

    def _release_locks(self, locks: list) -> None:
        if self.rlock and locks:
            for lock in locks:
                self.rlock.unlock(lock)

    def _invalidate_stock_cache(self, product_ids: List[int]) -> None:
        # 订单已提交，缓存失效失败只记录日志
        if not self.redis or not product_ids:
            return
        try:
            self.redis.delete(*[stock_cache_key(pid) for pid in product_ids])
            logger.debug(f"Cache invalidated for products {product_ids}")
        except RedisError as e:
            logger.warning(f"库存缓存失效失败: product_ids={product_ids}, error={str(e)}")
