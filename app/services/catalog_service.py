"""商品目录服务实现"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging
import math

from redis import Redis, RedisError
from sqlalchemy import delete, func, or_, select
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import PermissionDenied, ProductUnavailable, ValidationError
from app.core.redis import stock_cache_key
from app.core.security import CurrentUser, Role
from app.models.product import Product
from app.models.wishlist import WishlistItem
from app.services.stock_ledger import StockLedger

logger = logging.getLogger(__name__)

# 价格区间筛选
PRICE_FILTERS = {
    "low": lambda: Product.price <= 100,
    "medium": lambda: (Product.price > 100) & (Product.price <= 200),
    "high": lambda: Product.price > 200,
}

EDITABLE_FIELDS = ("name", "description", "price", "image_url")


class CatalogService:
    """商品目录核心服务类"""

    def __init__(self, db: Session, redis: Redis = None):
        self.db = db
        self.redis = redis

    def get_product(self, product_id: int) -> Product:
        product = self.db.get(Product, product_id)
        if product is None:
            raise ProductUnavailable(product_id)
        return product

    def list_products(self, page: int = 1, limit: Optional[int] = None, search: str = "",
                      price_filter: str = "all") -> Dict[str, Any]:
        """分页查询商品（支持关键字搜索与价格区间筛选）"""
        conditions = []
        if search:
            pattern = f"%{search.lower()}%"
            conditions.append(or_(
                func.lower(Product.name).like(pattern),
                func.lower(Product.description).like(pattern),
            ))
        if price_filter and price_filter != "all":
            if price_filter not in PRICE_FILTERS:
                raise ValidationError(f"价格筛选条件不合法: {price_filter}")
            conditions.append(PRICE_FILTERS[price_filter]())

        return self._paginate(conditions, page, limit)

    def list_seller_products(self, seller_id: int, page: int = 1,
                             limit: Optional[int] = None) -> Dict[str, Any]:
        return self._paginate([Product.seller_id == seller_id], page, limit)

    def list_all_products(self) -> List[Product]:
        """全部商品（不分页，供卖家/管理员后台使用）"""
        return list(self.db.execute(select(Product).order_by(Product.id)).scalars().all())

    def get_seller_product(self, product_id: int, user: CurrentUser) -> Product:
        """商品详情，仅所属卖家或管理员可见"""
        return self._get_owned_product(product_id, user)

    def _paginate(self, conditions: list, page: int, limit: Optional[int]) -> Dict[str, Any]:
        page = max(page or 1, 1)
        limit = limit or settings.DEFAULT_PAGE_SIZE

        total_items = self.db.execute(
            select(func.count()).select_from(Product).where(*conditions)
        ).scalar_one()

        products = self.db.execute(
            select(Product)
            .where(*conditions)
            .order_by(Product.id)
            .limit(limit)
            .offset((page - 1) * limit)
        ).scalars().all()

        return {
            "products": list(products),
            "total_items": total_items,
            "total_pages": math.ceil(total_items / limit) if total_items else 0,
            "current_page": page,
        }

    def create_product(self, seller_id: int, data: Dict[str, Any]) -> Product:
        product = Product(
            seller_id=seller_id,
            name=data["name"],
            description=data.get("description"),
            price=Decimal(str(data["price"])),
            stock=data["stock"],
            image_url=data.get("image_url"),
        )
        try:
            self.db.add(product)
            self.db.commit()
            logger.info(f"商品创建成功: product_id={product.id}, seller_id={seller_id}")
            return product
        except Exception as e:
            self.db.rollback()
            logger.error(f"商品创建失败: {str(e)}")
            raise

    def update_product(self, product_id: int, user: CurrentUser, data: Dict[str, Any]) -> Product:
        """编辑商品，库存变更走库存台账并记录日志"""
        try:
            product = self._get_owned_product(product_id, user)

            new_stock = data.get("stock")
            if new_stock is not None:
                if new_stock < 0:
                    raise ValidationError("库存不能为负数")
                # 在行锁下重新读取库存，必须先于其他字段赋值（populate_existing 会覆盖未提交的修改）
                ledger = StockLedger(self.db)
                product = ledger.lock_product(product_id)
                if product is None:
                    raise ProductUnavailable(product_id)

            for field in EDITABLE_FIELDS:
                if data.get(field) is not None:
                    value = data[field]
                    setattr(product, field, Decimal(str(value)) if field == "price" else value)

            if new_stock is not None:
                ledger.adjust(product, new_stock, operator=f"user_{user.id}")

            self.db.commit()
            logger.info(f"商品编辑成功: product_id={product_id}, user_id={user.id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"商品编辑失败: {str(e)}")
            raise

        self.invalidate_stock_cache(product_id)
        return product

    def delete_product(self, product_id: int, user: CurrentUser) -> None:
        try:
            product = self._get_owned_product(product_id, user)
            self.db.execute(delete(WishlistItem).where(WishlistItem.product_id == product_id))
            self.db.delete(product)
            self.db.commit()
            logger.info(f"商品删除成功: product_id={product_id}, user_id={user.id}")
        except Exception as e:
            self.db.rollback()
            logger.error(f"商品删除失败: {str(e)}")
            raise

        self.invalidate_stock_cache(product_id)

    def _get_owned_product(self, product_id: int, user: CurrentUser) -> Product:
        product = self.get_product(product_id)
        if user.role != Role.ADMIN and product.seller_id != user.id:
            raise PermissionDenied("商品不属于当前卖家")
        return product

    def get_product_stock(self, product_id: int) -> int:
        """查询商品可用库存（带缓存）"""
        cache_key = stock_cache_key(product_id)

        # 先查缓存
        if self.redis:
            cached = self.redis.get(cache_key)
            if cached is not None:
                logger.debug(f"Cache hit for product {product_id}")
                return int(cached)

        # 缓存未命中，查询数据库
        stock = self.db.execute(
            select(Product.stock).where(Product.id == product_id)
        ).scalar_one_or_none()
        available = stock if stock is not None else 0

        if self.redis:
            self.redis.setex(cache_key, settings.STOCK_CACHE_TTL, available)
            logger.debug(f"Cache set for product {product_id}: {available}")

        return available

    def batch_get_stocks(self, product_ids: List[int]) -> Dict[int, int]:
        """批量获取库存（带缓存优化）"""
        if not product_ids:
            return {}

        results = {}
        uncached_ids = []

        # 先查缓存
        if self.redis:
            cached_values = self.redis.mget([stock_cache_key(pid) for pid in product_ids])
            for pid, cached in zip(product_ids, cached_values):
                if cached is not None:
                    results[pid] = int(cached)
                    logger.debug(f"Batch cache hit for product {pid}")
                else:
                    uncached_ids.append(pid)
        else:
            uncached_ids = list(product_ids)

        if uncached_ids:
            rows = self.db.execute(
                select(Product.id, Product.stock).where(Product.id.in_(uncached_ids))
            ).all()
            stock_map = {row[0]: row[1] for row in rows}

            pipe = self.redis.pipeline() if self.redis else None
            for pid in uncached_ids:
                available = stock_map.get(pid, 0)
                results[pid] = available
                if pipe is not None:
                    pipe.setex(stock_cache_key(pid), settings.STOCK_CACHE_TTL, available)

            if pipe is not None:
                pipe.execute()
                logger.debug(f"Batch cache set for products {uncached_ids}")

        return results

    def invalidate_stock_cache(self, product_id: int) -> None:
        if not self.redis:
            return
        try:
            self.redis.delete(stock_cache_key(product_id))
            logger.debug(f"Cache invalidated for product {product_id}")
        except RedisError as e:
            logger.warning(f"库存缓存失效失败: product_id={product_id}, error={str(e)}")
