"""
彩色日志配置模块
提供统一的彩色日志配置，并对令牌、密码等敏感内容做脱敏
"""
import logging
import os
import re
import sys
from typing import Optional

try:
    from rich.console import Console
    from rich.logging import RichHandler
    RICH_AVAILABLE = True
except ImportError:
    RICH_AVAILABLE = False


_SENSITIVE_PATTERNS = [
    (re.compile(r"(bearer\s+)([A-Za-z0-9_\-\.]{20,})", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(authorization\s*[:=]\s*['\"]?)([^'\"\s]{10,})", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"((?:token|secret)\s*[:=]\s*['\"]?)([A-Za-z0-9_\-\.]{10,})", re.IGNORECASE), r"\1***REDACTED***"),
    (re.compile(r"(password\s*[:=]\s*['\"]?)([^'\"\s]+)", re.IGNORECASE), r"\1***REDACTED***"),
    # 三段式令牌 (未带前缀时)
    (re.compile(r"\beyJ[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+\.[A-Za-z0-9_\-]+"), "***TOKEN***"),
]


def sanitize_message(message: str) -> str:
    """对日志文本脱敏"""
    for pattern, replacement in _SENSITIVE_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


class SensitiveDataFilter(logging.Filter):
    """在格式化前替换记录中的敏感内容"""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        sanitized = sanitize_message(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = None
        return True


class ColorfulFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',      # 青色
        'INFO': '\033[32m',       # 绿色
        'WARNING': '\033[33m',    # 黄色
        'ERROR': '\033[31m',      # 红色
        'CRITICAL': '\033[35m',   # 紫色
    }
    TIME_COLOR = '\033[34m'      # 蓝色（时间）
    RESET = '\033[0m'

    def format(self, record):
        message = super().format(record)

        if self._fmt and '%(asctime)s' in self._fmt:
            time_str = self.formatTime(record, self.datefmt)
            message = message.replace(time_str, f"{self.TIME_COLOR}{time_str}{self.RESET}", 1)

        level_name = record.levelname
        if level_name in self.COLORS:
            colored_level = f"{self.COLORS[level_name]}{level_name}{self.RESET}"
            message = message.replace(level_name, colored_level, 1)

        return message


def _level_from_env(default: int = logging.INFO) -> int:
    name = os.environ.get("LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(name) if name else default
    return level if isinstance(level, int) else default


def setup_colorful_logging(level: Optional[int] = None, name: Optional[str] = None) -> logging.Logger:
    """
    设置彩色日志配置

    Args:
        level: 日志级别，缺省时读取环境变量 LOG_LEVEL (默认 INFO)
        name: 日志器名称

    Returns:
        配置好的日志器
    """
    if level is None:
        level = _level_from_env()

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    if RICH_AVAILABLE:
        console = Console()
        handler = RichHandler(
            console=console,
            show_time=True,
            show_level=True,
            show_path=False,
            enable_link_path=False,
            markup=False,
            rich_tracebacks=True,
            tracebacks_width=console.width,
            tracebacks_show_locals=False,
        )
        # RichHandler 自带时间与级别
        formatter = logging.Formatter('%(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    else:
        handler = logging.StreamHandler(sys.stdout)
        formatter = ColorfulFormatter(
            '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(SensitiveDataFilter())
    logger.addHandler(handler)
    return logger


def get_colorful_logger(name: Optional[str] = None) -> logging.Logger:
    """
    获取彩色日志器

    Args:
        name: 日志器名称

    Returns:
        彩色日志器
    """
    return setup_colorful_logging(name=name)
