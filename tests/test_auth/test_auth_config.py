import json
import logging

import pytest

import global_data
from auth import config as auth_config
from auth.jwt import DEFAULT_LIFETIME_SECONDS, InvalidSignature, TokenService


@pytest.fixture(autouse=True)
def restore_auth_config():
    """每个用例结束后按测试默认环境重建进程级令牌服务"""
    yield
    auth_config._init_config()


def test_env_token_secret_takes_priority(monkeypatch):
    monkeypatch.setenv("TOKEN_SECRET", "env-secret")
    monkeypatch.setenv("JWT_SECRET", "jwt-secret")
    auth_config._init_config()

    svc = auth_config.get_token_service()
    token = TokenService("env-secret").issue("1", now=1000)
    assert svc.verify(token, now=1000).sub == "1"
    assert auth_config.get_effective_config_snapshot()["secret_source"] == "env:TOKEN_SECRET"


def test_jwt_secret_env_fallback(monkeypatch):
    monkeypatch.delenv("TOKEN_SECRET", raising=False)
    monkeypatch.setenv("JWT_SECRET", "jwt-secret")
    auth_config._init_config()
    assert auth_config.get_effective_config_snapshot()["secret_source"] == "env:JWT_SECRET"


def test_config_file_secret(monkeypatch):
    monkeypatch.delenv("TOKEN_SECRET", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setitem(global_data.config_manager.config, "token_secret", "cfg-secret")
    auth_config._init_config()

    token = TokenService("cfg-secret").issue("7", now=1000)
    assert auth_config.get_token_service().verify(token, now=1000).sub == "7"
    assert auth_config.get_effective_config_snapshot()["secret_source"] == "config"


def test_generated_secret_warns_and_is_not_logged(monkeypatch, caplog):
    monkeypatch.delenv("TOKEN_SECRET", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setitem(global_data.config_manager.config, "token_secret", "")

    with caplog.at_level(logging.DEBUG, logger="auth.config"):
        auth_config._init_config()

    assert auth_config.get_effective_config_snapshot()["secret_source"] == "generated"
    assert any("No token secret configured" in r.getMessage() for r in caplog.records)

    # 随机密钥与任何固定密钥都不同
    token = TokenService("test-secret").issue("1", now=1000)
    with pytest.raises(InvalidSignature):
        auth_config.get_token_service().verify(token, now=1000)

    key = auth_config.get_token_service()._key.decode("utf-8")
    assert all(key not in r.getMessage() for r in caplog.records)


def test_expires_seconds_from_env(monkeypatch):
    monkeypatch.setenv("TOKEN_EXPIRES_SECONDS", "3600")
    auth_config._init_config()
    assert auth_config.get_token_expires_seconds() == 3600
    assert auth_config.get_token_service().lifetime_seconds == 3600


@pytest.mark.parametrize("raw", ["abc", "0", "-5"])
def test_invalid_expires_seconds_falls_back(monkeypatch, caplog, raw):
    monkeypatch.setenv("TOKEN_EXPIRES_SECONDS", raw)
    with caplog.at_level(logging.WARNING, logger="auth.config"):
        auth_config._init_config()
    assert auth_config.get_token_expires_seconds() == DEFAULT_LIFETIME_SECONDS
    assert caplog.records


def test_snapshot_never_contains_secret(monkeypatch):
    monkeypatch.setenv("TOKEN_SECRET", "do-not-leak")
    auth_config._init_config()
    snapshot = auth_config.get_effective_config_snapshot()
    assert "do-not-leak" not in repr(snapshot)


def test_password_hash_round_trip():
    stored = auth_config.hash_password("secret1")
    assert "secret1" not in stored
    assert auth_config.verify_password("secret1", stored)
    assert not auth_config.verify_password("secret2", stored)
    # 每次哈希使用不同的盐值
    assert auth_config.hash_password("secret1") != stored


@pytest.mark.parametrize("password,stored", [("", "a$b"), ("x", ""), ("x", "nodollar")])
def test_verify_password_rejects_empty_or_malformed(password, stored):
    assert not auth_config.verify_password(password, stored)


def test_hash_empty_password_is_empty():
    assert auth_config.hash_password("") == ""


def test_mistyped_lifetime_keeps_config_secret(monkeypatch, tmp_path):
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps({"token_secret": "prod-secret", "token_expires_seconds": "3600", "cors": ["*"]}),
        encoding="utf-8",
    )
    monkeypatch.delenv("TOKEN_SECRET", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.delenv("TOKEN_EXPIRES_SECONDS", raising=False)
    monkeypatch.setattr(global_data, "config_manager", global_data.ConfigManager(path))
    auth_config._init_config()

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert saved["token_secret"] == "prod-secret"
    assert saved["token_expires_seconds"] == DEFAULT_LIFETIME_SECONDS
    snapshot = auth_config.get_effective_config_snapshot()
    assert snapshot["secret_source"] == "config"
    assert snapshot["token_expires_seconds"] == DEFAULT_LIFETIME_SECONDS
    token = TokenService("prod-secret").issue("1", now=1000)
    assert auth_config.get_token_service().verify(token, now=1000).sub == "1"
