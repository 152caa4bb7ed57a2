"""
鉴权路由
- 邮箱+密码登录、注册
- 成功时返回 {"success": true, "user": {...}, "token": "<bearer token>"}
- 令牌 sub 统一为字符串形式的用户 ID (在此处完成转换)
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

import tutor_db
from auth import config as auth_config
from auth.jwt import TokenPayload, TokenService
from auth.permissions import get_current_identity
from errors import ApiError

logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/v1/auth", tags=["鉴权"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MIN_PASSWORD_LENGTH = 6


# ============================
# 模型定义
# ============================

class LoginRequest(BaseModel):
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="明文密码")


class RegisterRequest(BaseModel):
    name: str = Field(..., description="昵称")
    email: str = Field(..., description="邮箱")
    password: str = Field(..., description="明文密码")


class AuthResponse(BaseModel):
    success: bool = True
    user: Dict[str, Any]
    token: str


# ============================
# 內部工具
# ============================

def _invalid_credentials() -> ApiError:
    return ApiError(status.HTTP_401_UNAUTHORIZED, "Invalid credentials")


def _issue_for(user: Dict[str, Any], tokens: TokenService) -> AuthResponse:
    # 数据库 ID 为整数，令牌中统一携带字符串
    token = tokens.issue(str(user["id"]))
    return AuthResponse(user=tutor_db.public_user(user), token=token)


# ============================
# 路由
# ============================

@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    tokens: TokenService = Depends(auth_config.get_token_service),
) -> AuthResponse:
    """
    邮箱+密码登录
    邮箱不存在与密码错误返回相同的 401，避免账号枚举
    """
    user = tutor_db.find_user_by_email(body.email)
    if not user:
        logger.warning("登录失败: 邮箱不存在")
        raise _invalid_credentials()

    if not auth_config.verify_password(body.password, user.get("password_hash") or ""):
        logger.warning(f"用户 {user.get('id')} 密码验证失败")
        raise _invalid_credentials()

    logger.info(f"用户 {user.get('id')} 登录成功")
    return _issue_for(user, tokens)


@router.post("/register", response_model=AuthResponse)
async def register(
    body: RegisterRequest,
    tokens: TokenService = Depends(auth_config.get_token_service),
) -> AuthResponse:
    """注册新用户并直接签发令牌"""
    name = body.name.strip()
    email = body.email.strip()

    if not name:
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Name is required")
    if not _EMAIL_RE.match(email):
        raise ApiError(status.HTTP_400_BAD_REQUEST, "Invalid email")
    if len(body.password) < _MIN_PASSWORD_LENGTH:
        raise ApiError(status.HTTP_400_BAD_REQUEST, f"Password must be at least {_MIN_PASSWORD_LENGTH} characters")

    try:
        user = tutor_db.create_user(name, email, auth_config.hash_password(body.password))
    except tutor_db.DuplicateEmail:
        logger.info("注册失败: 邮箱已存在")
        raise ApiError(status.HTTP_409_CONFLICT, "Email already registered")

    return _issue_for(user, tokens)


@router.get("/me")
async def get_me(identity: TokenPayload = Depends(get_current_identity)) -> Dict[str, Any]:
    """
    返回当前令牌的 claims (sub、iat、exp)
    """
    return {"success": True, "claims": identity.model_dump()}
