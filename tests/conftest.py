import os
import sys
import tempfile

import pytest

# 确保项目根目录在 sys.path 中
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# global_data 在导入时创建数据目录与 config.json，测试期间指向临时目录
os.environ.setdefault("DATA_BASE_PATH", tempfile.mkdtemp(prefix="tutor-test-data-"))
os.environ.setdefault("TOKEN_SECRET", "test-secret")

from fastapi import FastAPI
from fastapi.testclient import TestClient

from auth import config as auth_config
from auth.jwt import TokenService
from logging_config import get_colorful_logger

NOW = 1700000000
SECRET = "test-secret"


@pytest.fixture(scope="session")
def logger():
    """提供一个带彩色格式的测试级别 logger"""
    return get_colorful_logger("tests")


@pytest.fixture
def tokens():
    """固定密钥与时钟的令牌服务"""
    return TokenService(SECRET, clock=lambda: NOW)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    """
    将学习数据文件指向临时路径 (文件尚未创建，首次访问时写入种子数据)
    """
    p = tmp_path / "tutor_db.json"
    monkeypatch.setenv("TUTOR_DB_PATH", str(p))
    return p


@pytest.fixture
def client(db_path, tokens):
    """
    仅挂载业务路由的最小应用；令牌服务替换为固定时钟版本
    """
    from routers import include_routers

    app = include_routers(FastAPI())
    app.dependency_overrides[auth_config.get_token_service] = lambda: tokens
    return TestClient(app)


@pytest.fixture
def register_user(client):
    """
    注册用户的工厂方法，返回响应 JSON
    使用方式:
        data = register_user("Ana", "ana@example.com", "secret1")
    """
    def _register(name: str = "Ana", email: str = "ana@example.com", password: str = "secret1"):
        resp = client.post("/api/v1/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return resp.json()
    return _register
