"""
funcaptcha 基础异常类

定义核心异常基类 FunCaptchaError 以及配置、构建阶段的异常。
"""

from __future__ import annotations

import traceback
from typing import Any, Dict, Optional


class FunCaptchaError(Exception):
    """
    funcaptcha 基础异常类

    所有自定义异常的父类，提供统一的异常格式和序列化支持。

    属性:
        message: 错误消息
        code: 错误代码，默认为异常类名
        details: 额外的错误详情字典
        cause: 原始异常（支持异常链）
        stage: 出错的流水线阶段 (config/build/encrypt/compose/transport/response)

    示例:
        >>> raise FunCaptchaError("操作失败", code="OP_FAILED", details={"public_key": "TESTKEY"})
        >>> try:
        ...     risky_operation()
        ... except Exception as e:
        ...     raise FunCaptchaError("包装后的异常", cause=e)
    """

    stage: str = "unknown"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ):
        """
        初始化异常实例

        参数:
            message: 错误消息描述
            code: 错误代码，用于程序化处理。如果未指定，使用类名
            details: 附加的错误详情，如 URL、字段名等
            cause: 导致此异常的原始异常，用于异常链追踪
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        """返回格式化的错误字符串"""
        parts = [f"[{self.stage}:{self.code}] {self.message}"]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.cause:
            parts.append(f"Caused by: {type(self.cause).__name__}: {self.cause}")
        return " | ".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code!r}, "
            f"stage={self.stage!r}, "
            f"details={self.details!r})"
        )

    def to_dict(self) -> Dict[str, Any]:
        """
        将异常转换为字典格式，便于JSON序列化

        返回:
            包含错误信息的字典
        """
        result = {
            "error": self.code,
            "message": self.message,
            "stage": self.stage,
            "details": self.details,
            "type": self.__class__.__name__,
        }
        if self.cause:
            result["cause"] = {"type": type(self.cause).__name__, "message": str(self.cause)}
        return result

    def get_traceback(self) -> str:
        """获取完整的异常堆栈追踪"""
        return "".join(traceback.format_exception(type(self), self, self.__traceback__))


class ConfigError(FunCaptchaError):
    """
    配置错误

    当配置项无效、集成 profile 文件缺失或格式错误时抛出。

    示例:
        >>> raise ConfigError("profile 文件格式错误", details={"path": "profiles/generic.yaml"})
    """

    stage = "config"


class ProfileNotFound(ConfigError):
    """请求的集成 profile 未注册"""

    def __init__(
        self,
        message: str = "集成 profile 不存在",
        profile: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        _details = details or {}
        if profile:
            _details["profile"] = profile
        super().__init__(message, details=_details, **kwargs)
        self.profile = profile


class BuildError(FunCaptchaError):
    """
    指纹描述符构建错误

    调用方输入不合法时抛出，例如 User-Agent 为空、附加条目与保留键冲突。

    示例:
        >>> raise BuildError("附加条目与保留键冲突", details={"key": "api_type"})
    """

    stage = "build"


__all__ = [
    "FunCaptchaError",
    "ConfigError",
    "ProfileNotFound",
    "BuildError",
]
