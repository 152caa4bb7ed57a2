"""
API 错误响应
所有错误统一渲染为 {"success": false, "message": "..."}，与移动端约定一致
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApiError(HTTPException):
    """带统一 message 的 HTTP 错误"""

    def __init__(self, status_code: int, message: str, headers: Optional[Dict[str, str]] = None):
        super().__init__(status_code=status_code, detail=message, headers=headers)


class Unauthorized(ApiError):
    """鉴权失败一律使用该错误，不向客户端暴露具体原因"""

    def __init__(self) -> None:
        super().__init__(
            status.HTTP_401_UNAUTHORIZED,
            "Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )


def _envelope(message: Any) -> Dict[str, Any]:
    return {"success": False, "message": message}


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse(status_code=exc.status_code, content=_envelope(message), headers=exc.headers)


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        if loc:
            fields.append(".".join(loc))
    logger.info("请求体校验失败: %s %s fields=%s", request.method, request.url.path, fields)
    if fields:
        message = "Missing or invalid fields: " + ", ".join(sorted(set(fields)))
    else:
        message = "Invalid request body"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=_envelope(message))


def install_error_handlers(app: FastAPI) -> FastAPI:
    # 404/405 等框架错误同样走统一格式
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    return app
