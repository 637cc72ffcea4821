"""心愿单服务"""

from typing import List
import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DuplicateWishlistItem, NotFound, ProductUnavailable
from app.models.product import Product
from app.models.wishlist import WishlistItem

logger = logging.getLogger(__name__)


class WishlistService:

    def __init__(self, db: Session):
        self.db = db

    def list_items(self, user_id: int) -> List[Product]:
        """心愿单中的商品"""
        return list(self.db.execute(
            select(Product)
            .join(WishlistItem, WishlistItem.product_id == Product.id)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc())
        ).scalars().all())

    def add_item(self, user_id: int, product_id: int) -> WishlistItem:
        if self.db.get(Product, product_id) is None:
            raise ProductUnavailable(product_id)

        if self._find_item(user_id, product_id) is not None:
            raise DuplicateWishlistItem()

        item = WishlistItem(user_id=user_id, product_id=product_id)
        try:
            self.db.add(item)
            self.db.commit()
        except IntegrityError:
            # 并发重复收藏，由唯一约束兜底
            self.db.rollback()
            raise DuplicateWishlistItem()
        except Exception as e:
            self.db.rollback()
            logger.error(f"加入心愿单失败: user_id={user_id}, product_id={product_id}, error={str(e)}")
            raise

        logger.info(f"加入心愿单成功: user_id={user_id}, product_id={product_id}")
        return item

    def _find_item(self, user_id: int, product_id: int):
        return self.db.execute(
            select(WishlistItem).where(
                WishlistItem.user_id == user_id,
                WishlistItem.product_id == product_id,
            )
        ).scalar_one_or_none()

    def remove_item(self, user_id: int, product_id: int) -> None:
        try:
            result = self.db.execute(
                delete(WishlistItem).where(
                    WishlistItem.user_id == user_id,
                    WishlistItem.product_id == product_id,
                )
            )
            if result.rowcount == 0:
                raise NotFound("心愿单中没有该商品")
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
