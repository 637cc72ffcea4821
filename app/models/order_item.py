from sqlalchemy import (
    Column,
    BigInteger,
    Integer,
    Numeric,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, BigIntPK


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    order_id = Column(
        BigInteger,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="订单ID",
    )

    # 不建外键：商品删除后历史订单明细仍需保留
    product_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="商品ID",
    )

    quantity = Column(
        Integer,
        nullable=False,
        comment="购买数量",
    )

    unit_price = Column(
        Numeric(10, 2),
        nullable=False,
        comment="下单时的快照单价",
    )

    order = relationship("Order", back_populates="items")

    __table_args__ = (
        CheckConstraint(
            "quantity > 0",
            name="ck_order_items_quantity_positive",
        ),
    )
