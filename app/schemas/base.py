from pydantic import BaseModel, Field
from typing import Optional

# 主键为 BIGINT，超出范围的ID直接按参数错误处理
MAX_ID = 2**63 - 1
# 数量列为 INTEGER
MAX_QUANTITY = 2**31 - 1


class BaseResponse(BaseModel):
    """基础响应模型"""
    success: bool = Field(
        ...,
        description="请求是否成功"
    )
    message: Optional[str] = Field(
        None,
        description="响应消息"
    )
