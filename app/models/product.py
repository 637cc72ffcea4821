from sqlalchemy import (
    Column,
    BigInteger,
    String,
    Text,
    Integer,
    Numeric,
    TIMESTAMP,
    CheckConstraint,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, BigIntPK


class Product(Base):
    __tablename__ = "products"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    seller_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="卖家用户ID",
    )

    name = Column(
        String(255),
        nullable=False,
        comment="商品名称",
    )

    description = Column(
        Text,
        nullable=True,
        comment="商品描述",
    )

    price = Column(
        Numeric(10, 2),
        nullable=False,
        comment="当前售价",
    )

    stock = Column(
        Integer,
        nullable=False,
        server_default="0",
        comment="当前可售库存",
    )

    image_url = Column(
        String(512),
        nullable=True,
        comment="商品图片地址",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    updated_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
        onupdate=func.now(),
    )

    reviews = relationship(
        "Review",
        back_populates="product",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "stock >= 0",
            name="ck_products_stock_non_negative",
        ),
        CheckConstraint(
            "price >= 0",
            name="ck_products_price_non_negative",
        ),
    )


# -----------------------------
# 组合索引（按名称搜索）
# -----------------------------
Index(
    "idx_products_name",
    Product.name,
)
