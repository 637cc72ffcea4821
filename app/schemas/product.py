# app/schemas/product.py
from pydantic import BaseModel, Field
from typing import Annotated, Dict, List, Optional
from decimal import Decimal
from datetime import datetime

from app.schemas.base import BaseResponse, MAX_ID, MAX_QUANTITY


class ProductSchema(BaseModel):
    id: int
    seller_id: int
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int
    image_url: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProductCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="商品名称")
    description: Optional[str] = Field(None, description="商品描述")
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2, description="售价")
    stock: int = Field(..., ge=0, le=MAX_QUANTITY, description="库存")
    image_url: Optional[str] = Field(None, max_length=512, description="图片地址")


class ProductUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0, le=MAX_QUANTITY)
    image_url: Optional[str] = Field(None, max_length=512)


class ProductResponse(BaseResponse):
    data: ProductSchema


class ProductListResponse(BaseResponse):
    products: List[ProductSchema] = []
    total_items: int = 0
    total_pages: int = 0
    current_page: int = 1


class StockResponse(BaseResponse):
    """单个商品库存响应"""
    product_id: int
    available_stock: int = Field(..., ge=0)


class BatchStockQueryRequest(BaseModel):
    """批量查询库存请求"""
    product_ids: List[Annotated[int, Field(gt=0, le=MAX_ID)]] = Field(
        ...,
        min_length=1,
        max_length=100,
        description="商品ID列表",
        examples=[[1, 2, 3]]
    )


class BatchStockResponse(BaseResponse):
    data: Dict[int, int] = Field(..., description="商品ID到库存数量的映射")


class CeleryTaskResponse(BaseResponse):
    task_id: Optional[str] = Field(None, description="任务ID")


# ==================== 评价 / 心愿单 ====================

class ReviewSchema(BaseModel):
    id: int
    product_id: int
    user_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="评分 1-5")
    comment: Optional[str] = Field(None, max_length=2000)


class WishlistAddRequest(BaseModel):
    product_id: int = Field(..., gt=0, le=MAX_ID, description="商品ID")
