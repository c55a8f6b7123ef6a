"""
工具模块
"""

from .logger import (
    ColoredFormatter,
    SecureFileHandler,
    configure_root_logger,
    get_logger,
    set_log_level,
)

__all__ = [
    "ColoredFormatter",
    "SecureFileHandler",
    "configure_root_logger",
    "get_logger",
    "set_log_level",
]
