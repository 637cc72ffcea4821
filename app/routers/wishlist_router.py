"""心愿单 API 路由"""

from fastapi import APIRouter, Depends, HTTPException, Path, Body
from sqlalchemy.orm import Session
import logging

from app.core.dependencies import get_db, BuyerDep
from app.core.security import CurrentUser
from app.services.wishlist_service import WishlistService
from app.schemas.base import BaseResponse, MAX_ID
from app.schemas.product import ProductSchema, WishlistAddRequest

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/wishlist",
    tags=["心愿单"],
)

@router.get("", summary="我的心愿单")
async def list_wishlist(
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db)
):
    try:
        service = WishlistService(db)
        products = service.list_items(user.id)
        return {
            "success": True,
            "data": [ProductSchema.model_validate(p).model_dump(mode="json") for p in products]
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"查询心愿单失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.post("", response_model=BaseResponse, summary="加入心愿单")
async def add_to_wishlist(
    request: WishlistAddRequest = Body(...),
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db)
):
    try:
        service = WishlistService(db)
        service.add_item(user.id, request.product_id)
        return {"success": True, "message": "已加入心愿单"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"加入心愿单失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))

@router.delete("/{product_id}", response_model=BaseResponse, summary="移出心愿单")
async def remove_from_wishlist(
    product_id: int = Path(..., gt=0, le=MAX_ID, description="商品ID"),
    user: CurrentUser = BuyerDep,
    db: Session = Depends(get_db)
):
    try:
        service = WishlistService(db)
        service.remove_item(user.id, product_id)
        return {"success": True, "message": "已移出心愿单"}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"移出心愿单失败: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))
