"""订单 API 路由"""

from fastapi import APIRouter, Depends, HTTPException, Path, Body
from sqlalchemy.orm import Session
import logging

from app.core.dependencies import get_db, get_redis, get_redlock, BuyerDep, CurrentUserDep
from app.core.security import CurrentUser
from app.schemas.base import MAX_ID
from app.services.order_service import OrderService
from app.schemas.order import (
    PlaceOrderRequest,
    OrderResponse,
    OrderListResponse,
    OrderSchema,
)

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/orders",
    tags=["订单管理"],
    responses={
        400: {"description": "请求参数错误或库存不足"},
        401: {"description": "缺少用户身份"},
        403: {"description": "角色无权访问"},
        404: {"description": "资源未找到"},
        429: {"description": "库存操作冲突"},
        500: {"description": "服务器内部错误"}
    }
)

@router.post(
    "",
    status_code=201,
    response_model=OrderResponse,
    summary="下单",
    description="""提交商品及数量，原子地创建订单并扣减库存。

    **特点：**
    - 行级锁 + 条件更新双重校验，防止超卖
    - 下单时冻结商品单价，后续改价不影响历史订单
    - 任一商品校验失败整单回滚，不会留下部分订单
    - 不自动重试，失败后由调用方决定是否重新提交
    """,
    responses={
        400: {
            "description": "参数不合法或库存不足",
            "content": {
                "application/json": {
                    "examples": {
                        "insufficient_stock": {
                            "summary": "库存不足",
                            "value": {
                                "success": False,
                                "error": "InsufficientStock",
                                "message": "库存不足: product_id=2, requested=5, available=2",
                                "product_id": 2,
                                "requested": 5,
                                "available": 2
                            }
                        },
                        "empty_order": {
                            "summary": "空订单",
                            "value": {
                                "success": False,
                                "error": "EmptyOrder",
                                "message": "订单商品列表不能为空"
                            }
                        }
                    }
                }
            }
        }
    }
)
async def place_order(
    request: PlaceOrderRequest = Body(..., description="下单请求参数"),
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db),
    redis = Depends(get_redis),
    rlock = Depends(get_redlock)
):
    """下单（买家或管理员）"""
    try:
        service = OrderService(db, redis, rlock)
        order = service.place_order(user.id, [item.model_dump() for item in request.items])
        return {
            "success": True,
            "message": "下单成功",
            "data": OrderSchema.model_validate(order)
        }
    except HTTPException:
        # 透传 HTTPException
        raise
    except Exception as e:
        logger.error(f"下单失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "",
    response_model=OrderListResponse,
    summary="我的订单",
    description="返回当前买家的订单，按创建时间倒序。"
)
async def list_orders(
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db)
):
    try:
        service = OrderService(db)
        orders = service.list_orders(user.id)
        return {
            "success": True,
            "data": [OrderSchema.model_validate(o) for o in orders]
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询订单列表失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="订单详情",
    description="买家只能查看自己的订单，管理员可以查看全部订单。"
)
async def get_order(
    order_id: int = Path(..., gt=0, le=MAX_ID, description="订单ID"),
    user: CurrentUser = CurrentUserDep,
    db: Session = Depends(get_db)
):
    try:
        service = OrderService(db)
        order = service.get_order(order_id, user)
        return {
            "success": True,
            "data": OrderSchema.model_validate(order)
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询订单失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
