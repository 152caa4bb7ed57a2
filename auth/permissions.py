"""
身份驗證依賴
從 Authorization: Bearer <token> 解析並驗證令牌，失敗一律 401
"""

import logging
import re
from typing import Optional

from fastapi import Depends, Header

from auth import config as auth_config
from auth.jwt import TokenError, TokenPayload, TokenService
from errors import Unauthorized

logger = logging.getLogger(__name__)

_BEARER_RE = re.compile(r"^\s*bearer\s+(\S+)\s*$", re.IGNORECASE)


def _extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization:
        logger.debug("_extract_bearer_token: 缺少 Authorization 頭")
        raise Unauthorized()
    match = _BEARER_RE.match(authorization)
    if not match:
        logger.debug("_extract_bearer_token: Authorization 頭格式無效")
        raise Unauthorized()
    return match.group(1)


def get_current_identity(
    authorization: Optional[str] = Header(None),
    tokens: TokenService = Depends(auth_config.get_token_service),
) -> TokenPayload:
    """
    校驗 Bearer 令牌並返回 claims。
    失敗原因只寫入日誌 (錯誤類型)，客戶端只會看到通用的 Unauthorized。
    """
    token = _extract_bearer_token(authorization)
    try:
        return tokens.verify(token)
    except TokenError as e:
        logger.warning(f"get_current_identity: 令牌校驗失敗，錯誤類型: {type(e).__name__}")
        raise Unauthorized()


def get_current_user_id(identity: TokenPayload = Depends(get_current_identity)) -> str:
    """返回規範化的字符串用戶 ID。"""
    return str(identity.sub)
