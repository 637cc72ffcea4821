"""订单聚合：由价格快照构造订单头及明细"""

from decimal import Decimal
from typing import Sequence

from app.core.exceptions import EmptyOrder
from app.models.order import Order, OrderStatus
from app.models.order_item import OrderItem
from app.services.pricing import PriceSnapshot


def build(buyer_id: int, snapshots: Sequence[PriceSnapshot]) -> Order:
    if not snapshots:
        raise EmptyOrder()

    total = sum((s.line_total for s in snapshots), Decimal("0"))
    return Order(
        buyer_id=buyer_id,
        total=total,
        status=OrderStatus.PENDING,
        items=[
            OrderItem(
                product_id=s.product_id,
                quantity=s.quantity,
                unit_price=s.unit_price,
            )
            for s in snapshots
        ],
    )
