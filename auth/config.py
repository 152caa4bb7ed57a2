"""
Auth configuration loader and helpers.

- Token secret priority: ENV TOKEN_SECRET > ENV JWT_SECRET > config.json token_secret
  > random per-process secret (tokens will not survive a restart; logged as WARNING).
- Token lifetime priority: ENV TOKEN_EXPIRES_SECONDS > config.json token_expires_seconds > 604800.
- The secret is never logged and never returned by any accessor except the TokenService itself.
- Password hashing helpers used by the login/register routes.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
import secrets
from typing import Any, Dict, Optional

import global_data
from auth.jwt import DEFAULT_LIFETIME_SECONDS, TokenService

logger = logging.getLogger(__name__)

_ENV_TOKEN_SECRET = "TOKEN_SECRET"
_ENV_JWT_SECRET = "JWT_SECRET"
_ENV_TOKEN_EXPIRES_SECONDS = "TOKEN_EXPIRES_SECONDS"

_TOKEN_SERVICE: Optional[TokenService] = None
_SECRET_SOURCE = "unset"
_EXPIRES_SECONDS = DEFAULT_LIFETIME_SECONDS


def hash_password(password: str) -> str:
    """
    使用隨機鹽值 + SHA256 哈希密碼。
    返回 "<salt>$<hex digest>"，空密碼返回空字符串。
    """
    if not password:
        return ""
    salt = secrets.token_hex(8)
    digest = hashlib.sha256((salt + password).encode("utf-8")).hexdigest()
    return f"{salt}${digest}"


def verify_password(password: str, hashed_password: str) -> bool:
    """
    驗證密碼是否與給定的哈希值匹配。
    """
    if not password or not hashed_password or "$" not in hashed_password:
        return False
    salt, expected = hashed_password.split("$", 1)
    digest = hashlib.sha256((salt + password).encode("utf-8")).hexdigest()
    return hmac.compare_digest(digest, expected)


def _resolve_secret() -> tuple:
    """返回 (secret, 來源)。來源僅用於診斷，不包含密鑰本身。"""
    for env_name in (_ENV_TOKEN_SECRET, _ENV_JWT_SECRET):
        value = os.environ.get(env_name)
        if value and value.strip():
            return value, f"env:{env_name}"
    value = global_data.config_manager.get("token_secret", "")
    if isinstance(value, str) and value.strip():
        return value, "config"
    logger.warning(
        "No token secret configured (set %s); using a random per-process secret, "
        "issued tokens will be invalid after restart",
        _ENV_TOKEN_SECRET,
    )
    return secrets.token_urlsafe(32), "generated"


def _resolve_expires_seconds() -> int:
    raw: Any = os.environ.get(_ENV_TOKEN_EXPIRES_SECONDS)
    if raw is None or not str(raw).strip():
        raw = global_data.config_manager.get("token_expires_seconds", DEFAULT_LIFETIME_SECONDS)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid token_expires_seconds %r; using default %d", raw, DEFAULT_LIFETIME_SECONDS)
        return DEFAULT_LIFETIME_SECONDS
    if value <= 0:
        logger.warning("Non-positive token_expires_seconds %d; using default %d", value, DEFAULT_LIFETIME_SECONDS)
        return DEFAULT_LIFETIME_SECONDS
    return value


def _init_config() -> None:
    """
    初始化認證配置：解析密鑰與有效期，構建進程級 TokenService。
    啟動時調用一次；測試可在修改環境變量後重新調用。
    """
    global _TOKEN_SERVICE, _SECRET_SOURCE, _EXPIRES_SECONDS
    secret, _SECRET_SOURCE = _resolve_secret()
    _EXPIRES_SECONDS = _resolve_expires_seconds()
    _TOKEN_SERVICE = TokenService(secret, lifetime_seconds=_EXPIRES_SECONDS)
    logger.debug("Token service ready. secret_source=%s, expires_seconds=%d", _SECRET_SOURCE, _EXPIRES_SECONDS)


def get_token_service() -> TokenService:
    """返回進程級 TokenService (FastAPI 依賴)。"""
    if _TOKEN_SERVICE is None:
        _init_config()
    return _TOKEN_SERVICE


def get_token_expires_seconds() -> int:
    return _EXPIRES_SECONDS


def get_effective_config_snapshot() -> Dict[str, Any]:
    """
    返回有效配置的診斷視圖 (不含密鑰)。
    """
    return {
        "token_expires_seconds": _EXPIRES_SECONDS,
        "secret_source": _SECRET_SOURCE,
        "config_path": str(global_data.CONFIG_FILE),
        "tutor_db_path": str(global_data.TUTOR_DB_FILE),
    }


# 在模塊加載時自動初始化配置
_init_config()
