"""
学习面板路由 (需要登录)
用户 ID 只取自令牌的 sub，请求体中的 userId 不参与鉴权
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status

import tutor_db
from auth.permissions import get_current_user_id
from errors import ApiError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/dashboard", tags=["学习面板"])


def _build_dashboard(user_id: str) -> Dict[str, Any]:
    user = tutor_db.find_user_by_id(user_id)
    if not user:
        logger.warning(f"令牌有效但用户不存在: {user_id}")
        raise ApiError(status.HTTP_404_NOT_FOUND, "User not found")

    public = tutor_db.public_user(user)
    return {
        "success": True,
        "user": public,
        "lessons": tutor_db.get_lessons_for_user(user_id),
        "achievements": tutor_db.get_achievements_for_user(user_id),
        "stats": {
            "xp": public["xp"],
            "streak": public["streak"],
            "level": public["level"],
        },
    }


@router.get("")
@router.get("/") # 同時匹配帶斜線的形式
async def get_dashboard(user_id: str = Depends(get_current_user_id)) -> Dict[str, Any]:
    """获取当前用户的课程进度、成就与统计"""
    return _build_dashboard(user_id)


@router.post("")
@router.post("/")
async def post_dashboard(
    body: Optional[Dict[str, Any]] = Body(None),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    """移动端以 POST 请求面板数据；body 被忽略"""
    return _build_dashboard(user_id)
