import enum

from sqlalchemy import (
    Column,
    BigInteger,
    Numeric,
    TIMESTAMP,
    Enum,
    Index,
    func,
)
from sqlalchemy.orm import relationship

from app.db.base import Base, BigIntPK


# 1️ 订单状态枚举（目前只会写入 PENDING）

class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# 2️ 订单头表

class Order(Base):
    __tablename__ = "orders"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    buyer_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="买家用户ID",
    )

    total = Column(
        Numeric(12, 2),
        nullable=False,
        comment="订单总额 = sum(数量 * 快照单价)",
    )

    status = Column(
        Enum(
            OrderStatus,
            name="order_status_type",
            values_callable=lambda statuses: [s.value for s in statuses],
        ),
        nullable=False,
        default=OrderStatus.PENDING,
        server_default=OrderStatus.PENDING.value,
        comment="订单状态",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )


# 3️ 高频查询优化索引（买家订单列表）

Index(
    "idx_orders_buyer_created_desc",
    Order.buyer_id,
    Order.created_at.desc(),
)
