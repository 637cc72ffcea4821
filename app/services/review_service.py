"""商品评价服务"""

from typing import List, Optional
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.exceptions import ProductUnavailable, ValidationError
from app.models.product import Product
from app.models.review import Review

logger = logging.getLogger(__name__)


class ReviewService:

    def __init__(self, db: Session):
        self.db = db

    def list_reviews(self, product_id: int) -> List[Review]:
        return list(self.db.execute(
            select(Review)
            .where(Review.product_id == product_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        ).scalars().all())

    def add_review(self, product_id: int, user_id: int, rating: int,
                   comment: Optional[str] = None) -> Review:
        if not 1 <= rating <= 5:
            raise ValidationError("评分必须在 1 到 5 之间")
        if self.db.get(Product, product_id) is None:
            raise ProductUnavailable(product_id)

        review = Review(product_id=product_id, user_id=user_id, rating=rating, comment=comment)
        try:
            self.db.add(review)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"添加评价失败: product_id={product_id}, error={str(e)}")
            raise

        logger.info(f"添加评价成功: product_id={product_id}, user_id={user_id}")
        return review
