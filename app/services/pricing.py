"""下单价格快照"""

from dataclasses import dataclass
from decimal import Decimal

from app.models.product import Product


@dataclass(frozen=True)
class PriceSnapshot:
    product_id: int
    quantity: int
    unit_price: Decimal
    line_total: Decimal


def snapshot(product: Product, quantity: int) -> PriceSnapshot:
    """冻结下单时刻的单价，之后商品改价不影响历史订单"""
    unit_price = Decimal(str(product.price))
    return PriceSnapshot(
        product_id=product.id,
        quantity=quantity,
        unit_price=unit_price,
        line_total=unit_price * quantity,
    )
