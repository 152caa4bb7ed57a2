#!/usr/bin/env python3
"""
工具腳本：使用當前配置的密鑰為指定用戶簽發令牌

用法:
    python generate_test_token.py 42
    python generate_test_token.py 42 --now 1700000000
"""

import argparse
import os
import sys

# 添加當前目錄到 Python 路徑
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from auth import config as auth_config
from auth.jwt import TokenError


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="為指定用戶簽發測試令牌")
    parser.add_argument("user_id", help="用戶 ID (以字符串形式寫入 sub)")
    parser.add_argument("--now", type=int, default=None, help="簽發時間 (UNIX 秒)，默認當前時間")
    args = parser.parse_args(argv)

    tokens = auth_config.get_token_service()
    try:
        token = tokens.issue(args.user_id, now=args.now)
    except TokenError as e:
        print(f"簽發失敗: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    print(token)
    return 0


if __name__ == "__main__":
    sys.exit(main())
