#!/usr/bin/env python3
"""
统一日志系统 - funcaptcha

提供彩色日志输出、文件日志记录、日志轮转等功能。
文件日志会掩盖 token、bda 等敏感值。

使用示例:
    from funcaptcha.utils.logger import get_logger, configure_root_logger

    configure_root_logger(level=logging.DEBUG, log_to_file=False)
    logger = get_logger("funcaptcha.cli")
    logger.info("这是一条信息")
"""

import copy
import logging
import os
import re
import sys
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
FILE_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """
    彩色日志格式化器

    根据日志级别为日志消息添加ANSI颜色代码。
    自动检测终端是否支持颜色输出。
    """

    # ANSI颜色代码
    COLORS = {
        "DEBUG": "\033[36m",  # 青色
        "INFO": "\033[32m",  # 绿色
        "WARNING": "\033[33m",  # 黄色
        "ERROR": "\033[31m",  # 红色
        "CRITICAL": "\033[35m",  # 紫色
    }
    RESET = "\033[0m"
    BOLD = "\033[1m"
    NAME_COLOR = "\033[94m"  # 蓝色

    def __init__(
        self, fmt: Optional[str] = None, datefmt: Optional[str] = None, colored: bool = True
    ):
        super().__init__(fmt, datefmt)
        self.colored = colored and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        """检测终端是否支持颜色"""
        if not hasattr(sys.stdout, "isatty") or not sys.stdout.isatty():
            return False
        if sys.platform == "win32":
            return bool(os.environ.get("TERM") or os.environ.get("WT_SESSION"))
        return True

    def format(self, record: logging.LogRecord) -> str:
        """格式化日志记录"""
        if not self.colored:
            return super().format(record)

        level_color = self.COLORS.get(record.levelname, "")

        original_levelname = record.levelname
        original_name = record.name

        record.levelname = f"{level_color}{self.BOLD}{record.levelname:8}{self.RESET}"
        record.name = f"{self.NAME_COLOR}{record.name}{self.RESET}"

        result = super().format(record)

        # 恢复原始值（避免影响其他handler）
        record.levelname = original_levelname
        record.name = original_name
        return result


class SecureFileHandler(RotatingFileHandler):
    """
    安全的文件日志处理器

    继承RotatingFileHandler，添加：
    - 自动创建日志目录
    - UTF-8编码支持
    - token / bda / 代理凭据过滤
    """

    SENSITIVE_PATTERNS = [
        (re.compile(r"(token|bda|passphrase)[\s]*[=:]\s*[\"']?([^\"'\s&|]+)", re.IGNORECASE), r"\1=***"),
        (re.compile(r"(https?|socks5h?)://[^:/\s]+:[^@/\s]+@"), r"\1://***:***@"),
    ]

    def __init__(
        self,
        filename: Union[str, Path],
        maxBytes: int = 10 * 1024 * 1024,  # 10MB
        backupCount: int = 5,
        filter_sensitive: bool = True,
    ):
        log_path = Path(filename)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        super().__init__(
            str(log_path), maxBytes=maxBytes, backupCount=backupCount, encoding="utf-8"
        )
        self.filter_sensitive = filter_sensitive

    def emit(self, record: logging.LogRecord) -> None:
        """发送日志记录 (在副本上过滤，不影响同一记录的其他处理器)"""
        if self.filter_sensitive:
            record = copy.copy(record)
            record.msg = self.mask_sensitive(record.getMessage())
            record.args = None
        super().emit(record)

    @classmethod
    def mask_sensitive(cls, msg: str) -> str:
        """掩盖敏感信息"""
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            msg = pattern.sub(replacement, msg)
        return msg


def _default_log_file(name: str) -> Path:
    date_str = datetime.now().strftime("%Y%m%d")
    return Path("logs") / f"{name}_{date_str}.log"


def get_logger(
    name: str,
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    colored: bool = True,
    log_to_file: bool = False,
    log_to_console: bool = True,
    filter_sensitive: bool = True,
) -> logging.Logger:
    """
    获取配置好的日志器

    Args:
        name: 日志器名称
        level: 日志级别（默认INFO）
        log_file: 日志文件路径（默认 logs/<name>_<date>.log）
        colored: 是否启用彩色输出
        log_to_file: 是否输出到文件
        log_to_console: 是否输出到控制台
        filter_sensitive: 是否过滤敏感信息

    Returns:
        配置好的Logger实例
    """
    logger = logging.getLogger(name)

    # 如果已配置，直接返回
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False  # 防止重复日志

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT, colored=colored)
        )
        logger.addHandler(console_handler)

    if log_to_file:
        file_handler = SecureFileHandler(
            filename=log_file or _default_log_file(name),
            filter_sensitive=filter_sensitive,
        )
        file_handler.setLevel(logging.DEBUG)  # 文件记录所有级别
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(file_handler)

    return logger


def configure_root_logger(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    colored: bool = True,
    log_to_file: bool = False,
    log_to_console: bool = True,
    filter_sensitive: bool = True,
    stream=sys.stderr,
    force: bool = False,
) -> logging.Logger:
    """
    配置根日志器，确保全局日志有统一输出（控制台 + 可选文件）

    Args:
        level: 日志级别
        log_file: 日志文件路径
        colored: 是否启用彩色输出
        log_to_file: 是否输出到文件
        log_to_console: 是否输出到控制台
        filter_sensitive: 是否过滤敏感信息
        stream: 控制台输出流
        force: 是否强制重置已有handler
    """
    root_logger = logging.getLogger()

    if root_logger.handlers and not force:
        return root_logger

    if force:
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)

    root_logger.setLevel(level)

    if log_to_console:
        console_handler = logging.StreamHandler(stream)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            ColoredFormatter(fmt=CONSOLE_FORMAT, datefmt=DATE_FORMAT, colored=colored)
        )
        root_logger.addHandler(console_handler)

    if log_to_file:
        file_handler = SecureFileHandler(
            filename=log_file or _default_log_file("funcaptcha"),
            filter_sensitive=filter_sensitive,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(fmt=FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)

    # urllib3 的连接池日志在 DEBUG 下过于冗长
    logging.getLogger("urllib3").setLevel(max(level, logging.INFO))
    return root_logger


def set_log_level(logger_name: str, level: Union[int, str]) -> None:
    """
    动态设置日志级别

    Args:
        logger_name: 日志器名称
        level: 日志级别（可以是int或字符串如'DEBUG'）
    """
    logger = logging.getLogger(logger_name)

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logger.setLevel(level)
    for handler in logger.handlers:
        handler.setLevel(level)


__all__ = [
    "ColoredFormatter",
    "SecureFileHandler",
    "get_logger",
    "configure_root_logger",
    "set_log_level",
]
