"""
健康检查路由
"""
from typing import Dict, Any
from fastapi import APIRouter
from pydantic import BaseModel
from datetime import datetime, timezone

import tutor_db

router = APIRouter(prefix="/api/v1/health", tags=["健康检查"])


class HealthStatus(BaseModel):
    """健康状态响应模型"""
    status: str  # "healthy" 或 "unhealthy"
    timestamp: str
    services: Dict[str, Any]


class StoreStatus(BaseModel):
    """数据存储状态模型"""
    status: str  # "ok" 或 "error"
    error: str = ""


def check_store_health() -> StoreStatus:
    """检查学习数据文件是否可读"""
    try:
        tutor_db.find_user_by_id("__health__")
        return StoreStatus(status="ok")
    except (OSError, ValueError) as e:
        return StoreStatus(status="error", error=f"{type(e).__name__}: {e}")


@router.get("/", response_model=HealthStatus)
async def get_system_health():
    """获取系统整体健康状态"""
    store_status = check_store_health()
    overall_status = "healthy" if store_status.status == "ok" else "unhealthy"
    return HealthStatus(
        status=overall_status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        services={"tutor_db": store_status.model_dump()},
    )
