"""
HTTP 模块

提供传输配置、共享传输客户端和按 profile 参数化的请求组装器

使用示例:
    from funcaptcha.http import HTTPConfig, RequestComposer, RequestOptions, TransportClient

    transport = TransportClient(HTTPConfig.from_env())
    composer = RequestComposer(profile)
    options = composer.resolve(RequestOptions(public_key="..."))
"""

from .composer import (
    REQUIRED_HEADERS,
    TOKEN_PATH,
    ComposedRequest,
    RequestComposer,
    RequestOptions,
    encode_form,
    format_rnd,
)
from .config import DEFAULT_USER_AGENT, HTTPConfig, PoolConfig, ProxyConfig
from .transport import TransportClient

__all__ = [
    # 配置
    "DEFAULT_USER_AGENT",
    "HTTPConfig",
    "PoolConfig",
    "ProxyConfig",
    # 传输
    "TransportClient",
    # 请求组装
    "REQUIRED_HEADERS",
    "TOKEN_PATH",
    "ComposedRequest",
    "RequestComposer",
    "RequestOptions",
    "encode_form",
    "format_rnd",
]
