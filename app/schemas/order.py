# app/schemas/order.py
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from app.models.order import OrderStatus
from app.schemas.base import BaseResponse, MAX_ID, MAX_QUANTITY


# ==================== 请求模型 ====================

class OrderItemRequest(BaseModel):
    """下单明细"""
    product_id: int = Field(
        ...,
        gt=0,
        le=MAX_ID,
        description="商品ID",
        examples=[1]
    )
    quantity: int = Field(
        ...,
        gt=0,
        le=MAX_QUANTITY,
        description="购买数量",
        examples=[2]
    )


class PlaceOrderRequest(BaseModel):
    """下单请求"""
    items: List[OrderItemRequest] = Field(
        ...,
        description="下单商品列表",
        examples=[[{"product_id": 1, "quantity": 2}]]
    )


# ==================== 响应模型 ====================

class OrderItemSchema(BaseModel):
    product_id: int
    quantity: int
    unit_price: Decimal

    class Config:
        from_attributes = True


class OrderSchema(BaseModel):
    id: int
    buyer_id: int
    total: Decimal
    status: OrderStatus
    created_at: Optional[datetime] = None
    items: List[OrderItemSchema] = []

    class Config:
        from_attributes = True


class OrderResponse(BaseResponse):
    data: OrderSchema


class OrderListResponse(BaseResponse):
    data: List[OrderSchema] = []
