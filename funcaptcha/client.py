#!/usr/bin/env python3
"""
Token 客户端

完整流水线:
    FingerprintBuilder -> KeyDeriver -> CipherEngine -> RequestComposer -> TransportClient

每次调用的描述符、口令、请求都是局部对象；只有 TransportClient 在调用之间共享。
不做任何重试，失败时抛出带 stage 的异常，由调用方决定如何处理。

使用示例:
    from funcaptcha import RequestOptions, TokenClient

    with TokenClient() as client:
        result = client.get_token(RequestOptions(public_key="...", site="https://example.com"))
        print(result.token)

        result = client.get_profile_token("openai")
"""

import json
import logging
import time
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, Optional

from requests.structures import CaseInsensitiveDict

from .crypto import CipherEngine, KeyDeriver
from .exceptions import DecodeError, UnexpectedStatusError
from .fingerprint import BuildContext, FingerprintBuilder
from .http import ComposedRequest, HTTPConfig, RequestComposer, RequestOptions, TransportClient
from .profiles import ProfileRegistry

logger = logging.getLogger(__name__)


@dataclass
class TokenResult:
    """验证服务返回的 token 结果"""

    token: str
    challenge_url: str = ""
    challenge_url_cdn: str = ""
    challenge_url_cdn_sri: Optional[str] = None
    disable_default_styling: bool = False
    iframe_height: Optional[int] = None
    iframe_width: Optional[int] = None
    kbio: bool = False
    mbio: bool = False
    tbio: bool = False
    noscript: str = ""

    # 字段名 -> 允许的 JSON 类型
    _SCHEMA = {
        "token": (str,),
        "challenge_url": (str,),
        "challenge_url_cdn": (str,),
        "challenge_url_cdn_sri": (str, type(None)),
        "disable_default_styling": (bool,),
        "iframe_height": (int, type(None)),
        "iframe_width": (int, type(None)),
        "kbio": (bool,),
        "mbio": (bool,),
        "tbio": (bool,),
        "noscript": (str,),
    }

    @property
    def session_token(self) -> str:
        """token 中第一个 | 之前的会话部分"""
        return self.token.split("|", 1)[0]

    @classmethod
    def from_dict(cls, data: Any) -> "TokenResult":
        """
        按结果结构解析响应 JSON，忽略未知字段，null 字段取默认值

        Raises:
            DecodeError: 不是 JSON 对象、缺少 token 或字段类型不符
        """
        if not isinstance(data, dict):
            raise DecodeError("响应不是 JSON 对象", details={"type": type(data).__name__})
        if not data.get("token"):
            raise DecodeError("响应缺少 token", field="token", details={"keys": sorted(data)})

        values: Dict[str, Any] = {}
        for name in (f.name for f in fields(cls)):
            if name not in data:
                continue
            value = data[name]
            # null 视为未提供，使用默认值
            if value is None:
                continue
            allowed = cls._SCHEMA[name]
            # bool 是 int 的子类，iframe 尺寸不接受 true/false
            if not isinstance(value, allowed) or (
                isinstance(value, bool) and bool not in allowed
            ):
                raise DecodeError(
                    "响应字段类型不符",
                    field=name,
                    details={"expected": [t.__name__ for t in allowed], "got": type(value).__name__},
                )
            values[name] = value
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class TokenClient:
    """
    Token 客户端

    transport 由调用方创建并可在多个 TokenClient / 线程之间共享；
    未传入时创建一个私有 transport，并在 close() 时释放。
    """

    def __init__(
        self,
        transport: Optional[TransportClient] = None,
        config: Optional[HTTPConfig] = None,
        registry: Optional[ProfileRegistry] = None,
        key_deriver: Optional[KeyDeriver] = None,
        cipher: Optional[CipherEngine] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            transport: 共享传输客户端
            config: transport 为空时用于创建私有 transport 的配置
            registry: profile 注册表，默认内置 profile
            key_deriver: 口令派生器
            cipher: 加密引擎
            clock: 时钟函数 (描述符时间戳与口令分桶共用)
        """
        self._owns_transport = transport is None
        self.transport = transport or TransportClient(config)
        self.registry = registry or ProfileRegistry.default()
        self.clock = clock
        self.key_deriver = key_deriver or KeyDeriver(clock=clock)
        self.cipher = cipher or CipherEngine()

    def prepare(self, options: RequestOptions) -> ComposedRequest:
        """
        构建描述符、加密并组装请求，不发送

        Raises:
            ProfileNotFound, RequestConstructionError, BuildError, EncryptionError
        """
        profile = self.registry.get(options.profile)
        composer = RequestComposer(profile, default_user_agent=self.transport.config.user_agent)
        options = composer.resolve(options)

        headers = composer.build_headers(options)
        user_agent = headers["User-Agent"]
        now = self.clock()

        descriptor = FingerprintBuilder(profile, clock=lambda: now).build(
            BuildContext(
                user_agent=user_agent,
                referer=CaseInsensitiveDict(headers).get("Referer", ""),
                location=options.location,
                site=options.site or "",
                base_url=options.base_url,
                extra_entries=options.extra_entries,
            )
        )
        passphrase = self.key_deriver.passphrase(user_agent, now)
        bda = self.cipher.encrypt(descriptor.serialize(), passphrase)

        return composer.compose(options, bda, headers)

    def execute(self, request: ComposedRequest, proxy: Optional[str] = None) -> TokenResult:
        """
        发送组装好的请求并解析结果

        Args:
            request: prepare() 的结果
            proxy: 覆盖 request.proxy 的代理

        Raises:
            TransportError: 传输失败
            UnexpectedStatusError: 非 2xx 状态码
            DecodeError: 响应体不符合结果结构
        """
        response = self.transport.send(
            request.method,
            request.url,
            headers=request.headers,
            body=request.body,
            proxy=proxy or request.proxy,
        )

        if not 200 <= response.status_code < 300:
            logger.warning("验证服务返回 HTTP %d: %s", response.status_code, request.url)
            raise UnexpectedStatusError(
                response.status_code, url=request.url, body=response.text
            )

        try:
            data = json.loads(response.text)
        except ValueError as e:
            raise DecodeError("响应体不是合法 JSON", details={"body": response.text[:200]}, cause=e)

        result = TokenResult.from_dict(data)
        logger.info("获取 token 成功: token=%s", result.session_token)
        return result

    def get_token(self, options: RequestOptions) -> TokenResult:
        """构建并发送 token 请求"""
        return self.execute(self.prepare(options))

    def get_profile_token(self, profile: str, **overrides) -> TokenResult:
        """
        使用固定集成 profile 获取 token

        Args:
            profile: profile 名称 (如 "openai")
            **overrides: RequestOptions 的其他字段 (proxy、headers 等)
        """
        return self.get_token(RequestOptions(profile=profile, **overrides))

    def close(self) -> None:
        if self._owns_transport:
            self.transport.close()

    def __enter__(self) -> "TokenClient":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def get_token(options: RequestOptions, client: Optional[TokenClient] = None) -> TokenResult:
    """
    便捷函数: 获取一次 token

    Args:
        options: 请求参数
        client: 复用的 TokenClient；为空时创建一次性客户端并在返回前关闭
    """
    if client is not None:
        return client.get_token(options)
    with TokenClient() as one_shot:
        return one_shot.get_token(options)


__all__ = [
    "TokenResult",
    "TokenClient",
    "get_token",
]
