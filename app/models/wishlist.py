from sqlalchemy import (
    Column,
    BigInteger,
    TIMESTAMP,
    ForeignKey,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, BigIntPK


class WishlistItem(Base):
    __tablename__ = "wishlist_items"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    user_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="买家用户ID",
    )

    product_id = Column(
        BigInteger,
        ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        comment="商品ID",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    product = relationship("Product")

    # 同一用户同一商品只能收藏一次
    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "product_id",
            name="uq_wishlist_user_product",
        ),
    )
