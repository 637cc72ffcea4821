"""调用方身份与角色校验

令牌的签发与校验由网关负责，本服务只信任网关透传的
X-User-Id / X-User-Role 请求头。
"""

from dataclasses import dataclass
import enum
import logging

from fastapi import Depends, Header, HTTPException

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    BUYER = "buyer"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(frozen=True)
class CurrentUser:
    id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def get_current_user(
    x_user_id: str = Header(None),
    x_user_role: str = Header(None),
) -> CurrentUser:
    """从网关请求头解析当前用户"""
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=401, detail="缺少用户身份信息")

    try:
        user_id = int(x_user_id)
        role = Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=401, detail="用户身份信息无效")

    if user_id <= 0:
        raise HTTPException(status_code=401, detail="用户身份信息无效")

    return CurrentUser(id=user_id, role=role)


def ensure_role(user: CurrentUser, role: Role) -> CurrentUser:
    """指定角色或管理员才能通过"""
    if user.role == role or user.is_admin:
        return user
    logger.warning(f"角色校验失败: user_id={user.id}, role={user.role.value}, expected={role.value}")
    raise HTTPException(status_code=403, detail=f"仅 {role.value} 或管理员可以访问")


def require_role(role: Role):
    """生成角色校验依赖"""

    def checker(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        return ensure_role(user, role)

    return checker
