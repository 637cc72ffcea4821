"""业务异常定义

所有业务异常都继承自 HTTPException，路由层可以直接透传，
由 app.main 中的全局异常处理器统一转换为 JSON 响应。
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException


class ShopError(HTTPException):
    """业务异常基类"""

    status_code = 400
    error = "ShopError"
    default_detail = "请求处理失败"

    def __init__(self, detail: Optional[str] = None, **extra: Any):
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail)
        self.extra: Dict[str, Any] = extra

    def to_dict(self) -> Dict[str, Any]:
        payload = {"success": False, "error": self.error, "message": self.detail}
        payload.update(self.extra)
        return payload


class ValidationError(ShopError):
    """下单参数不合法（空列表、数量非正整数等）"""
    status_code = 400
    error = "ValidationError"
    default_detail = "订单参数不合法"


class EmptyOrder(ValidationError):
    error = "EmptyOrder"
    default_detail = "订单商品列表不能为空"


class ProductUnavailable(ShopError):
    status_code = 404
    error = "ProductUnavailable"

    def __init__(self, product_id: int):
        super().__init__(f"商品不存在: product_id={product_id}", product_id=product_id)
        self.product_id = product_id


class InsufficientStock(ShopError):
    status_code = 400
    error = "InsufficientStock"

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"库存不足: product_id={product_id}, requested={requested}, available={available}",
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class PersistenceFailure(ShopError):
    """底层存储事务失败"""
    status_code = 500
    error = "PersistenceFailure"
    default_detail = "订单持久化失败"


class StockLockConflict(ShopError):
    status_code = 429
    error = "StockLockConflict"
    default_detail = "库存操作冲突，请稍后重试"


class PermissionDenied(ShopError):
    status_code = 403
    error = "PermissionDenied"
    default_detail = "无权执行此操作"


class NotFound(ShopError):
    status_code = 404
    error = "NotFound"
    default_detail = "资源不存在"


class DuplicateWishlistItem(ShopError):
    status_code = 400
    error = "DuplicateWishlistItem"
    default_detail = "商品已在心愿单中"
