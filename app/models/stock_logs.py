import enum

from sqlalchemy import (
    Column,
    BigInteger,
    String,
    Integer,
    TIMESTAMP,
    Enum,
    Index,
    func,
)
from app.db.base import Base, BigIntPK

# 1️ 库存变更类型
class ChangeType(str, enum.Enum):
    ORDER_COMMIT = "ORDER_COMMIT"   # 下单扣减
    ADJUST = "ADJUST"               # 卖家/管理员调整
# 2️ 库存日志表
class StockLog(Base):
    __tablename__ = "stock_logs"

    id = Column(
        BigIntPK,
        primary_key=True,
        autoincrement=True,
    )

    product_id = Column(
        BigInteger,
        nullable=False,
        index=True,
        comment="商品ID",
    )

    order_id = Column(
        BigInteger,
        nullable=True,
        index=True,
        comment="订单ID（库存调整时为空）",
    )

    change_type = Column(
        Enum(
            ChangeType,
            name="stock_change_type",
        ),
        nullable=False,
        comment="库存变更类型",
    )

    quantity = Column(
        Integer,
        nullable=False,
        comment="变更数量（扣减为负数）",
    )

    before_stock = Column(
        Integer,
        nullable=False,
        comment="变更前库存",
    )

    after_stock = Column(
        Integer,
        nullable=False,
        comment="变更后库存",
    )

    created_at = Column(
        TIMESTAMP(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    operator = Column(
        String(64),
        nullable=True,
        comment="操作人",
    )

    source = Column(
        String(50),
        nullable=True,
        comment="来源：order_service / catalog_service",
    )

# 3️ 组合索引（高频查询优化）


Index(
    "idx_stock_logs_product_created_desc",
    StockLog.product_id,
    StockLog.created_at.desc(),
)
