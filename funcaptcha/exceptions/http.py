"""
HTTP 相关异常定义

提供请求构建、传输、响应解析三个阶段的异常类型，便于精确捕获和处理网络错误
"""

from typing import Any, Dict, Optional

from .base import FunCaptchaError


class RequestConstructionError(FunCaptchaError):
    """请求构建错误 - base URL 或 public key 格式不合法"""

    stage = "compose"

    def __init__(
        self,
        message: str = "请求构建失败",
        field: Optional[str] = None,
        value: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        _details = details or {}
        if field:
            _details["field"] = field
        if value is not None:
            _details["value"] = value
        super().__init__(message, details=_details, **kwargs)
        self.field = field


class TransportError(FunCaptchaError):
    """传输层基础异常 - 连接、超时、DNS、代理、TLS"""

    stage = "transport"

    def __init__(
        self,
        message: str = "传输失败",
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        _details = details or {}
        if url:
            _details["url"] = url
        super().__init__(message, details=_details, **kwargs)
        self.url = url


class ConnectionError(TransportError):
    """连接错误异常 - 无法建立连接"""

    def __init__(self, message: str = "连接失败", url: Optional[str] = None, **kwargs):
        super().__init__(message, url=url, **kwargs)


class TimeoutError(TransportError):
    """请求超时异常"""

    def __init__(
        self,
        message: str = "请求超时",
        url: Optional[str] = None,
        timeout: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        """
        初始化超时异常

        Args:
            message: 错误消息
            url: 请求的 URL
            timeout: 超时配置 (秒，或 (connect, read) 元组)
            details: 额外详情
        """
        _details = details or {}
        if timeout is not None:
            _details["timeout"] = timeout
        super().__init__(message, url=url, details=_details, **kwargs)
        self.timeout = timeout


class ProxyError(TransportError):
    """代理相关错误"""

    def __init__(
        self,
        message: str = "代理连接失败",
        url: Optional[str] = None,
        proxy: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        _details = details or {}
        if proxy:
            _details["proxy"] = proxy
        super().__init__(message, url=url, details=_details, **kwargs)
        self.proxy = proxy


class SSLError(TransportError):
    """SSL/TLS 相关错误"""

    def __init__(self, message: str = "SSL 验证失败", url: Optional[str] = None, **kwargs):
        super().__init__(message, url=url, **kwargs)


class UnexpectedStatusError(FunCaptchaError):
    """验证服务返回了非 2xx 状态码"""

    stage = "response"

    def __init__(
        self,
        status_code: int,
        message: Optional[str] = None,
        url: Optional[str] = None,
        body: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        """
        初始化状态码异常

        Args:
            status_code: HTTP 状态码
            message: 错误消息
            url: 请求的 URL
            body: 响应体片段 (截断到 200 字符)
            details: 额外详情
        """
        _details = details or {}
        _details["status_code"] = status_code
        if url:
            _details["url"] = url
        if body:
            _details["body"] = body[:200]
        super().__init__(message or f"意外的 HTTP 状态码 {status_code}", details=_details, **kwargs)
        self.status_code = status_code
        self.url = url


class DecodeError(FunCaptchaError):
    """响应解析错误 - 响应体不是合法 JSON 或不符合 token 结果结构"""

    stage = "response"

    def __init__(
        self,
        message: str = "响应解析失败",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        **kwargs,
    ):
        _details = details or {}
        if field:
            _details["field"] = field
        super().__init__(message, details=_details, **kwargs)
        self.field = field


__all__ = [
    "RequestConstructionError",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "ProxyError",
    "SSLError",
    "UnexpectedStatusError",
    "DecodeError",
]
