"""
funcaptcha - FunCaptcha / Arkose 挑战 token 客户端

合成浏览器指纹描述符，使用与浏览器端 CryptoJS 兼容的口令加密，
按集成 profile 组装请求并获取挑战 token。

使用示例:
    from funcaptcha import RequestOptions, TokenClient

    with TokenClient() as client:
        result = client.get_token(
            RequestOptions(public_key="...", site="https://example.com")
        )
        print(result.token)
"""

from .client import TokenClient, TokenResult, get_token
from .crypto import CipherEngine, KeyDeriver
from .exceptions import (
    BuildError,
    ConfigError,
    DecodeError,
    EncryptionError,
    FunCaptchaError,
    ProfileNotFound,
    RequestConstructionError,
    TransportError,
    UnexpectedStatusError,
)
from .fingerprint import BuildContext, FingerprintBuilder, FingerprintDescriptor
from .http import HTTPConfig, RequestComposer, RequestOptions, TransportClient
from .profiles import IntegrationProfile, ProfileRegistry

__version__ = "1.0.0"

__all__ = [
    "__version__",
    # 客户端
    "TokenClient",
    "TokenResult",
    "get_token",
    # 组件
    "BuildContext",
    "FingerprintBuilder",
    "FingerprintDescriptor",
    "KeyDeriver",
    "CipherEngine",
    "RequestComposer",
    "RequestOptions",
    "HTTPConfig",
    "TransportClient",
    "IntegrationProfile",
    "ProfileRegistry",
    # 异常
    "FunCaptchaError",
    "ConfigError",
    "ProfileNotFound",
    "BuildError",
    "EncryptionError",
    "RequestConstructionError",
    "TransportError",
    "UnexpectedStatusError",
    "DecodeError",
]
