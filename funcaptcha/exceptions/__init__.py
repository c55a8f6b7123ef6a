"""
funcaptcha 统一异常体系

每个异常都带有 stage 属性，调用方可以区分加密阶段和网络阶段的失败。

异常层次结构:
FunCaptchaError (基类)
├── ConfigError (配置错误, stage=config)
│   └── ProfileNotFound
├── BuildError (描述符构建错误, stage=build)
├── EncryptionError (加密错误, stage=encrypt)
├── RequestConstructionError (请求构建错误, stage=compose)
├── TransportError (传输错误, stage=transport)
│   ├── ConnectionError
│   ├── TimeoutError
│   ├── ProxyError
│   └── SSLError
├── UnexpectedStatusError (非 2xx 状态码, stage=response)
└── DecodeError (响应解析错误, stage=response)

使用示例:
    from funcaptcha.exceptions import FunCaptchaError, UnexpectedStatusError

    try:
        result = client.get_token(options)
    except UnexpectedStatusError as e:
        print(e.status_code)
    except FunCaptchaError as e:
        print(e.stage, e.to_dict())
"""

from .base import BuildError, ConfigError, FunCaptchaError, ProfileNotFound
from .crypto import EncryptionError
from .http import (
    ConnectionError,
    DecodeError,
    ProxyError,
    RequestConstructionError,
    SSLError,
    TimeoutError,
    TransportError,
    UnexpectedStatusError,
)

__all__ = [
    "FunCaptchaError",
    "ConfigError",
    "ProfileNotFound",
    "BuildError",
    "EncryptionError",
    "RequestConstructionError",
    "TransportError",
    "ConnectionError",
    "TimeoutError",
    "ProxyError",
    "SSLError",
    "UnexpectedStatusError",
    "DecodeError",
]
