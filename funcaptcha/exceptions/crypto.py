"""
加密阶段异常定义
"""

from typing import Any, Dict, Optional

from .base import FunCaptchaError


class EncryptionError(FunCaptchaError):
    """
    BDA 加密/解密错误

    描述符内容无法编码（非 UTF-8、非 JSON 值、NaN），
    或者 BDA 信封损坏、口令不匹配时抛出。
    """

    stage = "encrypt"

    def __init__(
        self,
        message: str = "BDA 加密失败",
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        """
        初始化加密异常

        Args:
            message: 错误消息
            operation: 出错的操作 (serialize/encrypt/decrypt)
            details: 额外详情
        """
        _details = details or {}
        if operation:
            _details["operation"] = operation
        super().__init__(message, details=_details, **kwargs)
        self.operation = operation


__all__ = ["EncryptionError"]
