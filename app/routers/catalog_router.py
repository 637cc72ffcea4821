"""商品目录 API 路由（商品、库存、评价）"""

from fastapi import APIRouter, Depends, HTTPException, Query, Path, Body
from sqlalchemy.orm import Session
from typing import Optional
import logging

from app.core.dependencies import get_db, get_redis, BuyerDep, SellerDep
from app.core.security import CurrentUser
from app.services.catalog_service import CatalogService
from app.services.review_service import ReviewService
from app.schemas.product import (
    ProductSchema,
    ProductCreateRequest,
    ProductUpdateRequest,
    ProductResponse,
    ProductListResponse,
    StockResponse,
    BatchStockQueryRequest,
    BatchStockResponse,
    CeleryTaskResponse,
    ReviewSchema,
    ReviewCreateRequest,
)
from app.schemas.base import BaseResponse, MAX_ID
from tasks.shop_tasks import warm_stock_cache as celery_warm_cache_task

logger = logging.getLogger(__name__)
router = APIRouter(
    tags=["商品目录"],
    responses={
        400: {"description": "请求参数错误"},
        403: {"description": "无权操作该商品"},
        404: {"description": "商品未找到"},
        422: {"description": "请求验证失败"},
        500: {"description": "服务器内部错误"}
    }
)

@router.get(
    "/products",
    response_model=ProductListResponse,
    summary="商品列表",
    description="""分页查询商品，公开访问。

    **筛选：**
    - search: 按名称/描述模糊搜索（不区分大小写）
    - price_filter: all / low(<=100) / medium(100-200] / high(>200)
    """
)
async def list_products(
    page: int = Query(1, ge=1, description="页码"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="每页数量"),
    search: str = Query("", max_length=100, description="搜索关键字"),
    price_filter: str = Query("all", description="价格区间"),
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        result = service.list_products(page, limit, search, price_filter)
        return {
            "success": True,
            "products": [ProductSchema.model_validate(p) for p in result["products"]],
            "total_items": result["total_items"],
            "total_pages": result["total_pages"],
            "current_page": result["current_page"],
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询商品列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/seller/products",
    response_model=ProductListResponse,
    summary="我的商品",
    description="当前卖家发布的商品（卖家或管理员）。"
)
async def list_seller_products(
    page: int = Query(1, ge=1, description="页码"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="每页数量"),
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        result = service.list_seller_products(user.id, page, limit)
        return {
            "success": True,
            "products": [ProductSchema.model_validate(p) for p in result["products"]],
            "total_items": result["total_items"],
            "total_pages": result["total_pages"],
            "current_page": result["current_page"],
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询卖家商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.post(
    "/products",
    status_code=201,
    response_model=ProductResponse,
    summary="发布商品",
    description="卖家或管理员发布商品，图片以地址形式传入。"
)
async def create_product(
    request: ProductCreateRequest = Body(..., description="商品信息"),
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        product = service.create_product(user.id, request.model_dump())
        return {"success": True, "message": "商品发布成功", "data": ProductSchema.model_validate(product)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"发布商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.post(
    "/products/stock/batch",
    response_model=BatchStockResponse,
    summary="批量查询商品库存",
    description="""批量查询多个商品的库存数量。

    **限制：**
    - 单次最多查询100个商品
    - 不存在的商品返回 0
    """
)
async def batch_get_stocks(
    request: BatchStockQueryRequest = Body(..., description="批量查询请求参数"),
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        stocks = service.batch_get_stocks(request.product_ids)
        return BatchStockResponse(success=True, data=stocks)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"批量查询库存失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.post(
    "/products/stock/warm",
    response_model=CeleryTaskResponse,
    summary="异步预热库存缓存"
)
async def warm_stock_cache(
    request: BatchStockQueryRequest = Body(..., description="需要预热的商品ID"),
    user: CurrentUser = SellerDep
):
    """提交 Celery 任务预热库存缓存"""
    try:
        task = celery_warm_cache_task.delay(request.product_ids)
        return {
            "success": True,
            "message": "已提交缓存预热任务",
            "task_id": task.id
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Celery 任务提交失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/products/all",
    summary="全部商品",
    description="不分页返回全部商品（卖家或管理员）。"
)
async def list_all_products(
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db)
):
    try:
        service = CatalogService(db)
        products = service.list_all_products()
        return {
            "success": True,
            "data": [ProductSchema.model_validate(p).model_dump(mode="json") for p in products]
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询全部商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="商品详情",
    description="仅商品所属卖家或管理员可以查看。"
)
async def get_product(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        product = service.get_seller_product(product_id, user)
        return {"success": True, "data": ProductSchema.model_validate(product)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.put(
    "/products/{product_id}",
    response_model=ProductResponse,
    summary="编辑商品",
    description="仅商品所属卖家或管理员可以编辑，库存变更会记录库存日志。"
)
async def update_product(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    request: ProductUpdateRequest = Body(..., description="需要修改的字段"),
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        product = service.update_product(product_id, user, request.model_dump(exclude_unset=True))
        return {"success": True, "message": "商品编辑成功", "data": ProductSchema.model_validate(product)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"编辑商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.delete(
    "/products/{product_id}",
    response_model=BaseResponse,
    summary="删除商品",
    description="仅商品所属卖家或管理员可以删除，历史订单明细保留。"
)
async def delete_product(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    user: CurrentUser = SellerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        service.delete_product(product_id, user)
        return {"success": True, "message": "商品删除成功"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"删除商品失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/products/{product_id}/stock",
    response_model=StockResponse,
    summary="查询商品库存",
    description="""查询指定商品的可用库存数量。

    **缓存策略：**
    - 首先查询Redis缓存
    - 缓存未命中则查询数据库
    - 下单或编辑库存后缓存失效
    """
)
async def get_stock(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    db: Session = Depends(get_db),
    redis = Depends(get_redis)
):
    try:
        service = CatalogService(db, redis)
        stock = service.get_product_stock(product_id)
        return {
            "success": True,
            "product_id": product_id,
            "available_stock": stock
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询库存失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/products/{product_id}/reviews",
    summary="商品评价列表"
)
async def list_reviews(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    db: Session = Depends(get_db)
):
    try:
        service = ReviewService(db)
        reviews = service.list_reviews(product_id)
        return {
            "success": True,
            "data": [ReviewSchema.model_validate(r).model_dump(mode="json") for r in reviews]
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询评价失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.post(
    "/products/{product_id}/reviews",
    status_code=201,
    summary="发表评价",
    description="买家或管理员可以对商品发表 1-5 分的评价。"
)
async def add_review(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    request: ReviewCreateRequest = Body(..., description="评价内容"),
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db)
):
    try:
        service = ReviewService(db)
        review = service.add_review(product_id, user.id, request.rating, request.comment)
        return {
            "success": True,
            "message": "评价成功",
            "data": ReviewSchema.model_validate(review).model_dump(mode="json")
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"发表评价失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
