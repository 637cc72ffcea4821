from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Text,
    TIMESTAMP,
    ForeignKey,
    CheckConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, BigIntPK


class Review(Base):
    __tablename__ = "reviews"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    product_id = Column(
        BigInteger,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="商品ID",
    )

    user_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="评价用户ID",
    )

    rating = Column(
        Integer,
        nullable=False,
        comment="评分 1-5",
    )

    comment = Column(
        Text,
        nullable=True,
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    product = relationship("Product", back_populates="reviews")

    __table_args__ = (
        CheckConstraint(
            "rating >= 1 AND rating <= 5",
            name="ck_reviews_rating_range",
        ),
    )
