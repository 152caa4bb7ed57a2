from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from routers import include_routers
from logging_config import get_colorful_logger
from contextlib import asynccontextmanager
from auth.config import _init_config, get_effective_config_snapshot
import logging
import time
import global_data
import tutor_db

config_manager = global_data.config_manager

# 配置根日志器，各模块 logger 通过传播共用同一处理器
get_colorful_logger()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理器"""
    logger.info("正在初始化认证系统...")
    _init_config()
    snapshot = get_effective_config_snapshot()
    logger.info(
        f"认证系统初始化完成 (密钥来源: {snapshot['secret_source']}, 令牌有效期: {snapshot['token_expires_seconds']}s)"
    )

    path = tutor_db.ensure_db()
    logger.info(f"学习数据文件: {path}")

    yield

    logger.info("服务已停止")

# 创建FastAPI应用
app = include_routers(FastAPI(title="Sakae Tutor API", lifespan=lifespan))

# 中间件：记录请求和响应信息 (不记录请求头，避免泄露令牌)
async def log_requests(request: Request, call_next):
    start_time = time.time()
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(f"Response: {response.status_code} (处理时间: {process_time:.3f}s)")
    return response

# 注册中间件
app.add_middleware(BaseHTTPMiddleware, dispatch=log_requests)

# CORS 配置：移动端与开发服务器跨域访问
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(config_manager.get("cors", ["*"])), # type: ignore 静态检查无法识别
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True, workers=1)
