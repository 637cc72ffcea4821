"""模型单元测试"""
import pytest
from decimal import Decimal
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.models import (
    Product,
    Order,
    OrderStatus,
    OrderItem,
    StockLog,
    ChangeType,
    Review,
    WishlistItem,
)


class TestModels:
    """数据模型测试类"""

    def test_product_model(self, db_session):
        """测试商品模型"""
        product = Product(seller_id=100, name="测试商品", price=Decimal("19.99"), stock=3)
        db_session.add(product)
        db_session.commit()

        saved_product = db_session.execute(select(Product)).scalar_one()
        assert saved_product.id is not None
        assert saved_product.price == Decimal("19.99")
        assert saved_product.stock == 3
        assert saved_product.created_at is not None
        assert saved_product.updated_at is not None

    def test_order_with_items(self, db_session, make_product):
        """测试订单与明细"""
        product = make_product()
        order = Order(
            buyer_id=7,
            total=Decimal("20.00"),
            items=[OrderItem(product_id=product.id, quantity=2, unit_price=Decimal("10.00"))],
        )
        db_session.add(order)
        db_session.commit()

        saved_order = db_session.execute(select(Order)).scalar_one()
        assert saved_order.status == OrderStatus.PENDING
        assert saved_order.created_at is not None
        assert len(saved_order.items) == 1
        assert saved_order.items[0].order is saved_order

    def test_order_cascade_delete(self, db_session, make_product):
        """测试删除订单时级联删除明细"""
        product = make_product()
        order = Order(
            buyer_id=7,
            total=Decimal("10.00"),
            items=[OrderItem(product_id=product.id, quantity=1, unit_price=Decimal("10.00"))],
        )
        db_session.add(order)
        db_session.commit()

        db_session.delete(order)
        db_session.commit()

        assert db_session.execute(select(OrderItem)).first() is None

    def test_stock_log_model(self, db_session):
        """测试库存日志模型"""
        log = StockLog(
            product_id=1,
            order_id=9,
            change_type=ChangeType.ORDER_COMMIT,
            quantity=-2,
            before_stock=10,
            after_stock=8,
            operator="buyer_7",
            source="order_service",
        )
        db_session.add(log)
        db_session.commit()

        saved_log = db_session.execute(select(StockLog)).scalar_one()
        assert saved_log.change_type == ChangeType.ORDER_COMMIT
        assert (saved_log.before_stock, saved_log.after_stock) == (10, 8)
        assert saved_log.created_at is not None

    def test_negative_stock_rejected(self, db_session):
        """测试库存不能为负"""
        db_session.add(Product(seller_id=100, name="负库存", price=Decimal("1.00"), stock=-1))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_item_quantity_must_be_positive(self, db_session):
        """测试订单明细数量必须为正"""
        db_session.add(Order(
            buyer_id=7,
            total=Decimal("0.00"),
            items=[OrderItem(product_id=1, quantity=0, unit_price=Decimal("1.00"))],
        ))

        with pytest.raises(IntegrityError):
            db_session.commit()

    @pytest.mark.parametrize("rating", [0, 6])
    def test_review_rating_range(self, db_session, make_product, rating):
        """测试评分范围约束"""
        product = make_product()
        db_session.add(Review(product_id=product.id, user_id=7, rating=rating))

        with pytest.raises(IntegrityError):
            db_session.commit()

    def test_wishlist_unique_constraint(self, db_session, make_product):
        """测试同一用户不能重复收藏同一商品"""
        product = make_product()
        db_session.add(WishlistItem(user_id=7, product_id=product.id))
        db_session.commit()

        db_session.add(WishlistItem(user_id=7, product_id=product.id))
        with pytest.raises(IntegrityError):
            db_session.commit()
