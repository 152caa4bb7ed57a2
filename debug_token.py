#!/usr/bin/env python3
"""
調試腳本：校驗令牌並輸出 claims，失敗時輸出錯誤類型
"""

import argparse
import json
import sys
from pathlib import Path

# 添加項目路徑以便導入模塊
sys.path.insert(0, str(Path(__file__).parent))

from auth import config as auth_config
from auth.jwt import TokenError


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="校驗令牌並打印 claims")
    parser.add_argument("token", help="令牌字符串 (可帶 'Bearer ' 前綴)")
    parser.add_argument("--now", type=int, default=None, help="校驗時間 (UNIX 秒)，默認當前時間")
    args = parser.parse_args(argv)

    token = args.token.strip()
    if token.lower().startswith("bearer "):
        token = token[7:].strip()

    tokens = auth_config.get_token_service()
    try:
        claims = tokens.verify(token, now=args.now)
    except TokenError as e:
        print(f"令牌無效: {type(e).__name__}: {e}")
        return 1

    print(json.dumps(claims.model_dump(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
